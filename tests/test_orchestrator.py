import json

import pytest
import wox_plugin
from wox_plugin import ResultActionType, WoxPreviewType

from memos_wox.core.models import Attachment, Memo
from memos_wox.handlers.orchestrator import QueryOrchestrator
from memos_wox.handlers.query_handlers import IQueryHandler
from memos_wox.services.client_slot import ClientSlot
from memos_wox.utils import response_manager as i18n
from tests.fakes import FakeMemosRepository, make_query


def _memo(index: int, content: str, **kwargs) -> Memo:
    return Memo(name=f"memos/{index}", content=content, create_time=f"2024-01-0{index}T10:00:00Z", **kwargs)


@pytest.fixture
def opened_urls():
    return []


@pytest.fixture
def orchestrator(fake_api, client_slot, proxy, opened_urls):
    return QueryOrchestrator(fake_api, client_slot, proxy, url_opener=opened_urls.append)


@pytest.mark.asyncio
@pytest.mark.parametrize("query", [make_query(), make_query(search="milk"), make_query(search="x", command="create")])
async def test_unconfigured_shows_single_hint(fake_api, proxy, query):
    orchestrator = QueryOrchestrator(fake_api, ClientSlot(), proxy)

    results = await orchestrator.query(ctx=None, query=query)

    assert len(results) == 1
    assert results[0].title == i18n.UNCONFIGURED_TITLE
    assert results[0].sub_title == i18n.UNCONFIGURED_SUBTITLE
    assert results[0].actions == []


@pytest.mark.asyncio
async def test_create_command_offers_single_create_action(orchestrator, repository):
    results = await orchestrator.query(None, make_query(search="  Buy milk ", command="create"))

    assert len(results) == 1
    assert results[0].title == i18n.CREATE_TITLE
    assert results[0].sub_title == i18n.CREATE_SUBTITLE
    assert len(results[0].actions) == 1
    action = results[0].actions[0]
    assert action.is_default
    assert action.context_data == {"action": "create", "content": "Buy milk"}
    # 只构建结果，不发请求
    assert repository.calls == []


@pytest.mark.asyncio
async def test_create_command_without_content_shows_guidance(orchestrator, repository):
    results = await orchestrator.query(None, make_query(search="   ", command="create"))

    assert [result.title for result in results] == [i18n.CREATE_HINT_TITLE, i18n.CREATE_TAGS_HINT_TITLE]
    assert all(result.actions == [] for result in results)
    assert repository.calls == []


@pytest.mark.asyncio
async def test_command_is_case_insensitive(orchestrator):
    results = await orchestrator.query(None, make_query(search="note", command="CREATE"))
    assert results[0].actions[0].context_data["action"] == "create"


@pytest.mark.asyncio
async def test_unknown_command_is_treated_as_search(orchestrator, repository):
    await orchestrator.query(None, make_query(search="milk", command="other"))
    assert repository.calls == [("search", "milk")]


@pytest.mark.asyncio
async def test_list_maps_memos_in_order_with_descending_scores(orchestrator, repository):
    repository.memos = [_memo(3, "Third #a"), _memo(2, "Second"), _memo(1, "First")]

    results = await orchestrator.query(None, make_query())

    assert repository.calls == [("list", 1, 20)]
    assert [result.title for result in results] == ["Third", "Second", "First"]
    scores = [result.score for result in results]
    assert scores == sorted(scores, reverse=True)
    assert len(set(scores)) == len(scores)


@pytest.mark.asyncio
async def test_list_without_memos(orchestrator):
    results = await orchestrator.query(None, make_query())
    assert len(results) == 1
    assert results[0].title == i18n.NO_MEMOS_TITLE
    assert results[0].sub_title == i18n.NO_MEMOS_SUBTITLE


@pytest.mark.asyncio
async def test_list_error_becomes_warning_result(orchestrator, repository):
    repository.list_error = "Network error: connection refused"

    results = await orchestrator.query(None, make_query())

    assert len(results) == 1
    assert results[0].title == i18n.LIST_ERROR_TITLE
    assert results[0].sub_title == "Network error: connection refused"
    assert results[0].icon.image_data == "⚠️"


@pytest.mark.asyncio
async def test_search_returns_matching_memos(orchestrator, repository):
    repository.memos = [_memo(2, "Buy milk"), _memo(1, "walk dog")]

    results = await orchestrator.query(None, make_query(search=" MILK "))

    assert repository.calls == [("search", "MILK")]
    assert [result.title for result in results] == ["Buy milk"]


@pytest.mark.asyncio
async def test_search_without_results_offers_create(orchestrator, repository):
    repository.memos = [_memo(1, "walk dog")]

    results = await orchestrator.query(None, make_query(search="call mom"))

    assert len(results) == 1
    assert results[0].title == i18n.SEARCH_EMPTY_TITLE
    assert results[0].actions[0].context_data == {"action": "create", "content": "call mom"}


@pytest.mark.asyncio
async def test_search_error_becomes_warning_result(orchestrator, repository):
    repository.list_error = "HTTP error: 500 - boom"
    results = await orchestrator.query(None, make_query(search="x"))
    assert results[0].title == i18n.SEARCH_ERROR_TITLE
    assert results[0].sub_title == "HTTP error: 500 - boom"


@pytest.mark.asyncio
async def test_unexpected_handler_failure_becomes_warning(orchestrator, repository, fake_api):
    repository.list_exception = RuntimeError("kaput")

    results = await orchestrator.query(None, make_query())

    assert len(results) == 1
    assert results[0].sub_title == "Unknown error: kaput"
    assert fake_api.errors()


@pytest.mark.asyncio
async def test_memo_result_layout(orchestrator, repository):
    repository.memos = [_memo(1, "This is a rather long memo content #work #idea #work")]

    result = (await orchestrator.query(None, make_query()))[0]

    assert result.title == "This is a rather ..."
    assert result.sub_title.endswith(" · #work #idea")
    assert [tail.text for tail in result.tails] == ["#work", "#idea"]
    assert [action.name for action in result.actions] == [
        i18n.ACTION_OPEN, i18n.ACTION_COPY, i18n.ACTION_EDIT, i18n.ACTION_DELETE
    ]
    assert [action.is_default for action in result.actions] == [True, False, False, False]
    assert result.actions[0].context_data == {"action": "open", "url": "https://memos.test/memos/1"}

    edit = result.actions[2]
    assert edit.type == ResultActionType.FORM
    assert edit.on_submit is not None
    assert len(edit.form) == 1
    assert edit.form[0].value.max_lines > 1
    assert edit.form[0].value.default_value == "This is a rather long memo content #work #idea #work"


@pytest.mark.asyncio
async def test_memo_without_text_uses_name_as_title(orchestrator, repository):
    repository.memos = [_memo(1, "#only #tags")]
    result = (await orchestrator.query(None, make_query()))[0]
    assert result.title == "memos/1"


@pytest.mark.asyncio
async def test_preview_properties(orchestrator, repository):
    repository.memos = [
        _memo(1, "Plain text"),
        Memo(name="memos/2", content="Tagged #x", attachments=(Attachment(name="a/1", filename="f.pdf"),))
    ]

    plain, tagged = [result.preview for result in await orchestrator.query(None, make_query())]

    assert set(plain.preview_properties) == {i18n.PREVIEW_CREATED, i18n.PREVIEW_CHARACTERS}
    assert plain.preview_properties[i18n.PREVIEW_CHARACTERS] == "10"
    assert plain.preview_type == WoxPreviewType.MARKDOWN

    assert tagged.preview_properties == {
        i18n.PREVIEW_TAGS: "#x",
        i18n.PREVIEW_ATTACHMENTS: "1",
        i18n.PREVIEW_CHARACTERS: "9"
    }
    # 非图片附件只占一个空行
    assert tagged.preview_data == "Tagged\n\n"


@pytest.mark.asyncio
async def test_preview_images_go_through_running_proxy(orchestrator, repository, proxy):
    repository.memos = [Memo(name="memos/1", content="Photo", attachments=(
        Attachment(name="attachments/7", filename="cat.png", type="image/png"),
    ))]
    port = await proxy.start()

    preview = (await orchestrator.query(None, make_query()))[0].preview

    expected = f"http://127.0.0.1:{port}/?url=https%3A%2F%2Fmemos.test%2Ffile%2Fattachments%2F7%2Fcat.png"
    assert preview.preview_data == f"Photo\n\n![cat.png]({expected})"


@pytest.mark.asyncio
async def test_preview_images_use_direct_url_when_proxy_stopped(orchestrator, repository):
    repository.memos = [Memo(name="memos/1", content="Photo", attachments=(
        Attachment(name="attachments/7", filename="cat.png", type="image/png",
                   external_link="https://cdn.example.com/cat.png"),
    ))]

    preview = (await orchestrator.query(None, make_query()))[0].preview

    assert preview.preview_data == "Photo\n\n![cat.png](https://cdn.example.com/cat.png)"


@pytest.mark.asyncio
async def test_query_uses_client_from_slot_at_query_time(orchestrator, client_slot):
    replacement = FakeMemosRepository([_memo(1, "from new server")], host="https://other.test")
    client_slot.replace(replacement)

    results = await orchestrator.query(None, make_query())

    assert results[0].title == "from new server"
    assert results[0].actions[0].context_data["url"] == "https://other.test/memos/1"


@pytest.mark.asyncio
async def test_results_are_launcher_sdk_results(orchestrator, repository):
    repository.memos = [_memo(1, "Serialize me #x")]

    results = await orchestrator.query(None, make_query())

    assert all(isinstance(result, wox_plugin.Result) for result in results)
    payload = json.loads(results[0].to_json())
    assert payload["Title"] == "Serialize me"
    assert [action["Type"] for action in payload["Actions"]] == ["execute", "execute", "form", "execute"]


@pytest.mark.asyncio
async def test_registered_command_handler_takes_over_query(orchestrator, repository):
    class NoteHandler(IQueryHandler):
        async def handle(self, ctx, query, client):
            return [await self.builder.build_message_result(ctx, "note-title", query.search)]

    orchestrator.handler_factory.register_handler("Note", NoteHandler(orchestrator))

    results = await orchestrator.query(None, make_query(search="hello", command="note"))

    assert [(result.title, result.sub_title) for result in results] == [("note-title", "hello")]
    assert repository.calls == []
