"""Standard Webhooks 서명 검증 테스트"""
import base64
import hashlib
import hmac

from services import webhook_signature

RAW_KEY = b"dodo-test-signing-key-0123456789"
SECRET = "whsec_" + base64.b64encode(RAW_KEY).decode()
WEBHOOK_ID = "msg_2abc"
TIMESTAMP = "1735689600"
BODY = b'{"type":"payment.succeeded","data":{"metadata":{"user_id":"u1","plan_id":"pro"},"total_amount":1999}}'


def _canonical_signature(body: bytes, key: bytes = RAW_KEY) -> str:
    signed = f"{WEBHOOK_ID}.{TIMESTAMP}.".encode() + body
    return base64.b64encode(hmac.new(key, signed, hashlib.sha256).digest()).decode()


def test_accepts_canonical_signature():
    header = f"v1,{_canonical_signature(BODY)}"

    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, header, SECRET) is True


def test_rejects_signature_over_tampered_body():
    header = f"v1,{_canonical_signature(BODY)}"
    tampered = BODY.replace(b"1999", b"9999")

    assert webhook_signature.verify(tampered, WEBHOOK_ID, TIMESTAMP, header, SECRET) is False


def test_secret_without_prefix_is_accepted():
    header = f"v1,{_canonical_signature(BODY)}"
    bare_secret = base64.b64encode(RAW_KEY).decode()

    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, header, bare_secret) is True


def test_multiple_candidates_one_valid():
    """키 교체 중에는 여러 서명이 함께 온다"""
    stale = _canonical_signature(BODY, key=b"previous-rotated-key")
    header = f"v1,{stale} v1,{_canonical_signature(BODY)}"

    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, header, SECRET) is True


def test_rejects_wrong_version_prefix():
    header = f"v2,{_canonical_signature(BODY)}"

    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, header, SECRET) is False


def test_rejects_candidate_with_extra_non_ascii_characters():
    header = f"v1,{_canonical_signature(BODY)}éé"

    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, header, SECRET) is False


def test_non_ascii_candidate_does_not_hide_valid_one():
    header = f"v1,{_canonical_signature(BODY)}é v1,{_canonical_signature(BODY)}"

    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, header, SECRET) is True


def test_timestamp_is_part_of_signed_content():
    header = f"v1,{_canonical_signature(BODY)}"

    assert webhook_signature.verify(BODY, WEBHOOK_ID, "1735689601", header, SECRET) is False


def test_invalid_secret_returns_false_instead_of_raising():
    header = f"v1,{_canonical_signature(BODY)}"

    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, header, "whsec_not*base64!") is False


def test_garbage_header_returns_false():
    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, "garbage", SECRET) is False
    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, "", SECRET) is False


def test_sign_produces_verifiable_candidate():
    header = webhook_signature.sign(BODY, WEBHOOK_ID, TIMESTAMP, SECRET)

    assert header.startswith("v1,")
    assert webhook_signature.verify(BODY, WEBHOOK_ID, TIMESTAMP, header, SECRET) is True


def test_tolerance_window_disabled_by_default():
    header = webhook_signature.sign(BODY, WEBHOOK_ID, TIMESTAMP, SECRET)

    # 10년 뒤에도 기본 설정에서는 통과
    assert webhook_signature.verify(
        BODY, WEBHOOK_ID, TIMESTAMP, header, SECRET, now=int(TIMESTAMP) + 315360000
    ) is True


def test_tolerance_window_rejects_stale_timestamp():
    header = webhook_signature.sign(BODY, WEBHOOK_ID, TIMESTAMP, SECRET)

    assert webhook_signature.verify(
        BODY, WEBHOOK_ID, TIMESTAMP, header, SECRET, tolerance_seconds=300, now=int(TIMESTAMP) + 120
    ) is True
    assert webhook_signature.verify(
        BODY, WEBHOOK_ID, TIMESTAMP, header, SECRET, tolerance_seconds=300, now=int(TIMESTAMP) + 301
    ) is False


def test_tolerance_window_rejects_non_numeric_timestamp():
    header = webhook_signature.sign(BODY, WEBHOOK_ID, "yesterday", SECRET)

    assert webhook_signature.verify(
        BODY, WEBHOOK_ID, "yesterday", header, SECRET, tolerance_seconds=300
    ) is False
