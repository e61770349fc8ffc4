import base64
from urllib.parse import parse_qs

import httpx

from messagely.core.config import Settings
from messagely.services.notifier import SmsNotifier


def make_notifier(handler, **overrides):
    options = dict(
        account_sid="AC123",
        auth_token="secret",
        from_number="+15551112222",
        api_base="https://sms.test/2010-04-01",
    )
    options.update(overrides)
    return SmsNotifier(transport=httpx.MockTransport(handler), **options)


def test_send_posts_code_to_twilio():
    captured = {}

    def handler(request):
        captured["request"] = request
        return httpx.Response(201, json={"sid": "SM1"})

    assert make_notifier(handler).send("123456", "+15553334444") is True

    request = captured["request"]
    assert request.method == "POST"
    assert str(request.url) == "https://sms.test/2010-04-01/Accounts/AC123/Messages.json"
    expected_auth = base64.b64encode(b"AC123:secret").decode()
    assert request.headers["Authorization"] == f"Basic {expected_auth}"
    form = parse_qs(request.content.decode())
    assert form["From"] == ["+15551112222"]
    assert form["To"] == ["+15553334444"]
    assert form["Body"] == ["Your new password code is: 123456"]


def test_send_uses_override_number():
    captured = {}

    def handler(request):
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(201)

    notifier = make_notifier(handler, to_override="+15559999999")
    assert notifier.send("123456", "+15553334444") is True
    assert captured["form"]["To"] == ["+15559999999"]


def test_rejected_request_is_failure():
    notifier = make_notifier(lambda request: httpx.Response(400, json={"message": "bad number"}))
    assert notifier.send("123456", "not-a-number") is False


def test_transport_error_is_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert make_notifier(handler).send("123456", "+15553334444") is False


def test_unconfigured_notifier_does_not_send():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201)

    notifier = make_notifier(handler, account_sid="")
    assert notifier.configured is False
    assert notifier.send("123456", "+15553334444") is False
    assert calls == []


def test_from_settings():
    config = Settings(
        TWILIO_ACCOUNT_SID="AC9",
        TWILIO_AUTH_TOKEN="tok",
        TWILIO_FROM_NUMBER="+15550001111",
        SMS_TO_OVERRIDE="+15550002222",
    )
    notifier = SmsNotifier.from_settings(config)
    assert notifier.account_sid == "AC9"
    assert notifier.to_override == "+15550002222"
    assert notifier.configured is True
