"""Tests for GitHubRecordStore against the fake GitHub server."""

import json

import pytest

from gitgov_core.git import GitHubGitModule, GitHubGitModuleOptions
from gitgov_core.github.errors import GitHubApiError, GitHubApiErrorCode
from gitgov_core.record_store import (
    DEFAULT_ID_ENCODER,
    ConfigurationError,
    GitHubRecordStore,
    GitHubRecordStoreOptions,
    GitHubWriteOpts,
    RecordEntry,
)
from tests.fixtures.fake_github import OWNER, REPO, TOKEN

BRANCH = "gitgov-state"


@pytest.fixture
def fake(fake_github):
    fake_github.seed(BRANCH, {"tasks/existing.json": json.dumps({"title": "old"}, indent=2)})
    return fake_github


@pytest.fixture
def http_client(fake):
    return fake.client()


@pytest.fixture
def git_module(http_client):
    options = GitHubGitModuleOptions(owner=OWNER, repo=REPO, token=TOKEN, default_branch=BRANCH)
    return GitHubGitModule(options, http_client=http_client)


@pytest.fixture
def store(git_module, http_client):
    options = GitHubRecordStoreOptions(owner=OWNER, repo=REPO, ref=BRANCH, base_path="tasks")
    return GitHubRecordStore(options, git_module=git_module, token=TOKEN, http_client=http_client)


class TestReads:
    @pytest.mark.asyncio
    async def test_get_existing_and_missing(self, store):
        assert await store.get("existing") == {"title": "old"}
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_list_and_exists(self, store):
        assert await store.list() == ["existing"]
        assert await store.exists("existing") is True
        assert await store.exists("missing") is False

    @pytest.mark.asyncio
    async def test_list_missing_directory(self, fake, http_client):
        options = GitHubRecordStoreOptions(owner=OWNER, repo=REPO, ref=BRANCH, base_path="nothing")
        store = GitHubRecordStore(options, token=TOKEN, http_client=http_client)
        assert await store.list() == []

    @pytest.mark.asyncio
    async def test_withheld_content_is_invalid_response(self, store, fake):
        fake.withheld_paths.add("tasks/existing.json")
        with pytest.raises(GitHubApiError) as exc_info:
            await store.get("existing")
        assert exc_info.value.code == GitHubApiErrorCode.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_invalid_json_is_invalid_response(self, store, fake):
        fake.seed(BRANCH, {"tasks/broken.json": "{not json"})
        with pytest.raises(GitHubApiError) as exc_info:
            await store.get("broken")
        assert exc_info.value.code == GitHubApiErrorCode.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_permission_denied_propagates(self, store, fake):
        fake.fail("GET", "contents/", 403)
        with pytest.raises(GitHubApiError) as exc_info:
            await store.get("existing")
        assert exc_info.value.code == GitHubApiErrorCode.PERMISSION_DENIED


class TestWrites:
    @pytest.mark.asyncio
    async def test_create_sends_no_sha(self, store, fake):
        result = await store.put("new", {"title": "fresh"})

        assert result.commit_sha == fake.refs[BRANCH]
        assert json.loads(fake.file_at(BRANCH, "tasks/new.json")) == {"title": "fresh"}

    @pytest.mark.asyncio
    async def test_update_after_get_uses_cached_sha(self, store, fake):
        await store.get("existing")
        await store.put("existing", {"title": "new"}, GitHubWriteOpts(commit_message="update task"))

        assert json.loads(fake.file_at(BRANCH, "tasks/existing.json")) == {"title": "new"}
        assert fake.commits[fake.refs[BRANCH]]["message"] == "update task"

    @pytest.mark.asyncio
    async def test_blind_overwrite_is_rejected(self, store):
        with pytest.raises(GitHubApiError) as exc_info:
            await store.put("existing", {"title": "blind"})
        assert exc_info.value.code == GitHubApiErrorCode.CONFLICT

    @pytest.mark.asyncio
    async def test_stale_sha_is_conflict(self, store, fake):
        await store.get("existing")
        fake.seed(BRANCH, {"tasks/existing.json": json.dumps({"title": "concurrent"})})

        with pytest.raises(GitHubApiError) as exc_info:
            await store.put("existing", {"title": "mine"})
        assert exc_info.value.code == GitHubApiErrorCode.CONFLICT
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_consecutive_puts_reuse_returned_sha(self, store, fake):
        await store.put("new", {"v": 1})
        await store.put("new", {"v": 2})
        assert json.loads(fake.file_at(BRANCH, "tasks/new.json")) == {"v": 2}

    @pytest.mark.asyncio
    async def test_delete(self, store, fake):
        result = await store.delete("existing")

        assert result.commit_sha == fake.refs[BRANCH]
        assert fake.file_at(BRANCH, "tasks/existing.json") is None

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, store, fake):
        fake.reset_log()
        result = await store.delete("missing")
        assert result.commit_sha is None
        assert fake.calls("DELETE") == []

    @pytest.mark.asyncio
    async def test_delete_with_vanished_file_is_noop(self, store, fake):
        await store.get("existing")
        fake.seed(BRANCH, {})
        fake.fail("DELETE", "contents/tasks/existing.json", 404)

        result = await store.delete("existing")
        assert result.commit_sha is None


class TestPutMany:
    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_calls(self, store, fake):
        fake.reset_log()
        result = await store.put_many([])
        assert result.commit_sha is None
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_single_commit_for_many_records(self, store, fake):
        before = fake.refs[BRANCH]
        result = await store.put_many(
            [RecordEntry("a", {"n": 1}), RecordEntry("b", {"n": 2})],
            GitHubWriteOpts(commit_message="batch"),
        )

        assert result.commit_sha == fake.refs[BRANCH]
        assert fake.commits[result.commit_sha]["parents"] == [before]
        assert fake.commits[result.commit_sha]["message"] == "batch"
        assert len(fake.calls("PATCH")) == 1
        assert await store.list() == ["a", "b", "existing"]

    @pytest.mark.asyncio
    async def test_concurrent_writer_is_conflict(self, store, git_module, fake):
        original_create_commit = git_module.git_data.create_commit

        async def create_commit_then_race(*args, **kwargs):
            created = await original_create_commit(*args, **kwargs)
            fake.seed(BRANCH, {"tasks/other.json": "{}"}, "other writer")
            return created

        git_module.git_data.create_commit = create_commit_then_race

        with pytest.raises(GitHubApiError) as exc_info:
            await store.put_many([RecordEntry("a", {"n": 1}), RecordEntry("b", {"n": 2})])

        assert exc_info.value.code == GitHubApiErrorCode.CONFLICT
        assert fake.file_at(BRANCH, "tasks/a.json") is None
        assert sorted(await git_module.get_staged_files()) == ["tasks/a.json", "tasks/b.json"]

    @pytest.mark.asyncio
    async def test_commit_failure_keeps_transport_code(self, store, fake):
        fake.fail("POST", "git/blobs", 403)

        with pytest.raises(GitHubApiError) as exc_info:
            await store.put_many([RecordEntry("a", {"n": 1})])
        assert exc_info.value.code == GitHubApiErrorCode.PERMISSION_DENIED
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_requires_git_module(self, fake, http_client):
        options = GitHubRecordStoreOptions(owner=OWNER, repo=REPO, ref=BRANCH, base_path="tasks")
        store = GitHubRecordStore(options, token=TOKEN, http_client=http_client)
        with pytest.raises(ConfigurationError):
            await store.put_many([RecordEntry("a", 1)])

    @pytest.mark.asyncio
    async def test_invalid_id_aborts_before_staging(self, store, git_module, fake):
        fake.reset_log()
        with pytest.raises(GitHubApiError) as exc_info:
            await store.put_many([RecordEntry("ok", 1), RecordEntry("../bad", 2)])
        assert exc_info.value.code == GitHubApiErrorCode.INVALID_ID
        assert await git_module.get_staged_files() == []
        assert fake.requests == []


class TestIds:
    @pytest.mark.asyncio
    async def test_invalid_id_is_rejected_without_calls(self, store, fake):
        fake.reset_log()
        for call in (store.get("a/b"), store.put("..", {}), store.delete(""), store.exists("a\\b")):
            with pytest.raises(GitHubApiError) as exc_info:
                await call
            assert exc_info.value.code == GitHubApiErrorCode.INVALID_ID
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_encoder_round_trip(self, fake, http_client):
        options = GitHubRecordStoreOptions(
            owner=OWNER, repo=REPO, ref=BRANCH, base_path="actors", id_encoder=DEFAULT_ID_ENCODER
        )
        store = GitHubRecordStore(options, token=TOKEN, http_client=http_client)

        await store.put("human:camilo", {"name": "Camilo"})

        assert fake.file_at(BRANCH, "actors/human_camilo.json") is not None
        assert await store.list() == ["human:camilo"]
        assert await store.get("human:camilo") == {"name": "Camilo"}

    @pytest.mark.asyncio
    async def test_reserved_url_characters_land_in_the_named_file(self, store, fake):
        for record_id in ("task#1", "my task", "what?"):
            await store.put(record_id, {"id": record_id})

        assert json.loads(fake.file_at(BRANCH, "tasks/task#1.json")) == {"id": "task#1"}
        assert fake.file_at(BRANCH, "tasks/task") is None
        assert await store.list() == ["existing", "my task", "task#1", "what?"]
        assert await store.get("my task") == {"id": "my task"}

        await store.delete("task#1")
        assert await store.exists("task#1") is False

    @pytest.mark.asyncio
    async def test_underscore_with_encoder_is_invalid_id(self, fake, http_client):
        options = GitHubRecordStoreOptions(
            owner=OWNER, repo=REPO, ref=BRANCH, base_path="actors", id_encoder=DEFAULT_ID_ENCODER
        )
        store = GitHubRecordStore(options, token=TOKEN, http_client=http_client)
        fake.reset_log()

        with pytest.raises(GitHubApiError) as exc_info:
            await store.put("task_1", {})
        assert exc_info.value.code == GitHubApiErrorCode.INVALID_ID
        assert fake.requests == []
