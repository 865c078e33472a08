import logging

import pytest

from factories import (
    TOKEN,
    FakeTelegramApi,
    business_update,
    callback_update,
    document_update,
    inline_update,
    photo_update,
    text_update,
)
from tgbot.services.classifier import UpdateKind
from tgbot.services.telegram import TelegramAPIError
from tgbot.utils import FAILURE_NOTICES


class TestAccessors:
    def test_message_kind(self, make_ctx):
        ctx = make_ctx(text_update("hi", chat_id=42, message_id=7))
        assert ctx.kind is UpdateKind.MESSAGE
        assert ctx.chat_id() == "42"
        assert ctx.message_id() == "7"

    def test_business_kind(self, make_ctx):
        ctx = make_ctx(business_update(chat_id=9, connection_id="bc1"))
        assert ctx.chat_id() == "9"
        assert ctx.message_id() == ""
        assert ctx.business_connection_id() == "bc1"

    @pytest.mark.parametrize("payload", [inline_update(), callback_update(), {"update_id": 1}])
    def test_other_kinds_have_no_chat(self, make_ctx, payload):
        assert make_ctx(payload).chat_id() == ""

    def test_photo_and_document_use_message_chat(self, make_ctx):
        assert make_ctx(photo_update(chat_id=5)).chat_id() == "5"
        assert make_ctx(document_update(chat_id=6)).chat_id() == "6"

    def test_kind_is_read_only(self, make_ctx):
        ctx = make_ctx(text_update())
        with pytest.raises(AttributeError):
            ctx.kind = UpdateKind.INLINE


class TestReply:
    async def test_message_reply_targets_chat_and_message(self, make_ctx, fake_api):
        ctx = make_ctx(text_update("hi", chat_id=42, message_id=7))

        result = await ctx.reply("hi", "HTML")

        assert result == {"ok": True, "result": {"method": "sendMessage"}}
        assert fake_api.calls == [
            (
                "sendMessage",
                {"chat_id": "42", "reply_to_message_id": "7", "text": "hi", "parse_mode": "HTML"},
            )
        ]

    @pytest.mark.parametrize("payload", [photo_update(), document_update()])
    async def test_photo_and_document_reply_like_messages(self, make_ctx, fake_api, payload):
        await make_ctx(payload).reply("ok")
        method, params = fake_api.calls[0]
        assert method == "sendMessage"
        assert params["reply_to_message_id"] == "7"

    async def test_business_reply_uses_connection_not_reply_to(self, make_ctx, fake_api):
        await make_ctx(business_update(chat_id=9, connection_id="bc1")).reply("hey", "HTML")

        method, params = fake_api.calls[0]
        assert method == "sendMessage"
        assert params == {
            "chat_id": "9",
            "text": "hey",
            "business_connection_id": "bc1",
            "parse_mode": "HTML",
        }

    async def test_callback_reply_goes_to_callback_chat(self, make_ctx, fake_api):
        await make_ctx(callback_update(chat_id=77)).reply("pressed")

        assert fake_api.calls == [
            ("sendMessage", {"chat_id": "77", "text": "pressed", "parse_mode": ""})
        ]

    async def test_callback_without_message_is_noop(self, make_ctx, fake_api):
        assert await make_ctx(callback_update(with_message=False)).reply("x") is None
        assert fake_api.calls == []

    async def test_inline_reply_answers_with_article(self, make_ctx, fake_api):
        await make_ctx(inline_update("hi", query_id="q1")).reply("hi")

        method, params = fake_api.calls[0]
        assert method == "answerInlineQuery"
        assert params["inline_query_id"] == "q1"
        [result] = params["results"]
        assert result["type"] == "article"
        assert result["title"] == "Response"
        assert result["input_message_content"] == {"message_text": "hi", "parse_mode": ""}
        assert result["id"]

    async def test_options_cannot_override_routing_keys(self, make_ctx, fake_api):
        ctx = make_ctx(text_update(chat_id=42))
        await ctx.reply("hi", options={"chat_id": "999", "disable_notification": True})

        _, params = fake_api.calls[0]
        assert params["chat_id"] == "42"
        assert params["disable_notification"] is True


class TestUnsupportedKinds:
    @pytest.mark.parametrize(
        "op",
        [
            lambda c: c.reply("x"),
            lambda c: c.reply_photo("p"),
            lambda c: c.reply_video("v"),
            lambda c: c.send_typing(),
            lambda c: c.reply_inline("t", "m"),
            lambda c: c.answer_inline_query([{"type": "article"}]),
        ],
    )
    async def test_none_kind_never_calls_api(self, make_ctx, fake_api, op):
        ctx = make_ctx({"update_id": 99})
        assert await op(ctx) is None
        assert fake_api.calls == []

    async def test_photo_reply_unsupported_for_document_and_callback(self, make_ctx, fake_api):
        assert await make_ctx(document_update()).reply_photo("p") is None
        assert await make_ctx(callback_update()).reply_photo("p") is None
        assert await make_ctx(business_update()).reply_video("v") is None
        assert fake_api.calls == []

    async def test_typing_unsupported_for_inline_and_callback(self, make_ctx, fake_api):
        assert await make_ctx(inline_update()).send_typing() is None
        assert await make_ctx(callback_update()).send_typing() is None
        assert fake_api.calls == []

    async def test_inline_answers_only_for_inline_kind(self, make_ctx, fake_api):
        assert await make_ctx(text_update()).reply_inline("t", "m") is None
        assert await make_ctx(text_update()).answer_inline_query([]) is None
        assert fake_api.calls == []


class TestMedia:
    @pytest.mark.parametrize("payload", [text_update(), photo_update()])
    async def test_reply_photo(self, make_ctx, fake_api, payload):
        await make_ctx(payload).reply_photo("https://img/x.png", "nice")
        assert fake_api.calls == [
            (
                "sendPhoto",
                {
                    "chat_id": "42",
                    "reply_to_message_id": "7",
                    "photo": "https://img/x.png",
                    "caption": "nice",
                },
            )
        ]

    async def test_reply_video(self, make_ctx, fake_api):
        await make_ctx(text_update()).reply_video("https://vid/x.mp4")
        method, params = fake_api.calls[0]
        assert method == "sendVideo"
        assert params["video"] == "https://vid/x.mp4"
        assert params["reply_to_message_id"] == "7"

    async def test_inline_photo_and_video_results(self, make_ctx, fake_api):
        ctx = make_ctx(inline_update(query_id="q9"))
        await ctx.reply_photo("https://img/x.png")
        await ctx.reply_video("https://vid/x.mp4")

        (m1, p1), (m2, p2) = fake_api.calls
        assert m1 == m2 == "answerInlineQuery"
        assert p1["inline_query_id"] == p2["inline_query_id"] == "q9"
        assert p1["results"][0]["type"] == "photo"
        assert p1["results"][0]["photo_url"] == "https://img/x.png"
        assert p2["results"][0]["type"] == "video"
        assert p2["results"][0]["mime_type"] == "video/mp4"

    async def test_answer_inline_query_passes_results(self, make_ctx, fake_api):
        results = [{"type": "article", "id": "1", "title": "t"}]
        await make_ctx(inline_update(query_id="q1")).answer_inline_query(results)
        assert fake_api.calls == [
            ("answerInlineQuery", {"inline_query_id": "q1", "results": results})
        ]


class TestTyping:
    async def test_business_typing_is_scoped_by_connection(self, make_ctx, fake_api):
        await make_ctx(business_update(chat_id=9, connection_id="bc1")).send_typing()
        assert fake_api.calls == [
            (
                "sendChatAction",
                {"business_connection_id": "bc1", "chat_id": "9", "action": "typing"},
            )
        ]

    async def test_typing_twice_sends_twice(self, make_ctx, fake_api):
        ctx = make_ctx(text_update(chat_id=42))
        await ctx.send_typing()
        await ctx.send_typing()
        assert fake_api.calls == [
            ("sendChatAction", {"chat_id": "42", "action": "typing"}),
            ("sendChatAction", {"chat_id": "42", "action": "typing"}),
        ]


class TestErrorIsolation:
    async def test_failed_reply_sends_one_notice(self, make_ctx):
        api = FakeTelegramApi(fail_once={"sendMessage"})
        ctx = make_ctx(text_update(chat_id=42), api=api)

        assert await ctx.reply("hi", "HTML") is None

        assert len(api.calls) == 2
        assert api.calls[1] == (
            "sendMessage",
            {"chat_id": "42", "text": FAILURE_NOTICES["message"], "parse_mode": ""},
        )

    async def test_failed_reply_and_failed_notice_are_both_logged(self, make_ctx, caplog):
        api = FakeTelegramApi(fail={"sendMessage"})
        ctx = make_ctx(text_update(chat_id=42), api=api)

        with caplog.at_level(logging.ERROR, logger="tgbot.services.context"):
            assert await ctx.reply("hi") is None

        assert api.methods() == ["sendMessage", "sendMessage"]
        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("Error in reply") for m in messages)
        assert any(m.startswith("Failed to send error message") for m in messages)

    async def test_failed_photo_notice_uses_photo_text(self, make_ctx):
        api = FakeTelegramApi(fail={"sendPhoto"})
        await make_ctx(text_update(chat_id=42), api=api).reply_photo("p")
        assert api.calls[-1] == (
            "sendMessage",
            {"chat_id": "42", "text": FAILURE_NOTICES["photo"], "parse_mode": ""},
        )

    async def test_business_notice_keeps_connection(self, make_ctx):
        api = FakeTelegramApi(fail={"sendChatAction"})
        await make_ctx(business_update(chat_id=9, connection_id="bc1"), api=api).send_typing()
        method, params = api.calls[-1]
        assert method == "sendMessage"
        assert params["chat_id"] == "9"
        assert params["business_connection_id"] == "bc1"

    async def test_callback_notice_goes_to_callback_chat(self, make_ctx):
        api = FakeTelegramApi(fail_once={"sendMessage"})
        await make_ctx(callback_update(chat_id=77), api=api).reply("x")
        assert api.calls[-1][1]["chat_id"] == "77"

    async def test_inline_failure_has_no_channel_for_notice(self, make_ctx):
        api = FakeTelegramApi(fail={"answerInlineQuery"})
        assert await make_ctx(inline_update(), api=api).reply("x") is None
        assert api.methods() == ["answerInlineQuery"]

    async def test_get_file_returns_result(self, make_ctx, fake_api):
        response = await make_ctx(document_update(file_id="d1")).get_file("d1")
        assert response["result"]["file_path"] == "documents/file_1.pdf"
        assert fake_api.calls == [("getFile", {"file_id": "d1"})]

    async def test_get_file_notifies_then_reraises(self, make_ctx):
        api = FakeTelegramApi(fail={"getFile"})
        ctx = make_ctx(document_update(chat_id=42), api=api)

        with pytest.raises(TelegramAPIError):
            await ctx.get_file("d1")

        assert api.calls == [
            ("getFile", {"file_id": "d1"}),
            ("sendMessage", {"chat_id": "42", "text": FAILURE_NOTICES["file"], "parse_mode": ""}),
        ]

    async def test_get_file_reraises_even_when_notice_fails(self, make_ctx):
        api = FakeTelegramApi(fail={"getFile", "sendMessage"})
        with pytest.raises(TelegramAPIError) as excinfo:
            await make_ctx(document_update(), api=api).get_file("d1")
        assert excinfo.value.method == "getFile"


def test_file_url(make_ctx):
    ctx = make_ctx(document_update())
    assert ctx.file_url("documents/a.pdf") == f"https://api.telegram.test/file/bot{TOKEN}/documents/a.pdf"
