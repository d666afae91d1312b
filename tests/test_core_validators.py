import pytest

from iam_import.core import validators
from iam_import.core.exceptions import ErrorCode, UserImportError
from iam_import.core.models import AuthFactorInfo, ProviderUserInfo, TotpInfo, UploadAccountUser


class TestPredicates:
    @pytest.mark.parametrize("value", [b"", b"abc", bytearray(b"x"), memoryview(b"y")])
    def test_is_bytes(self, value):
        assert validators.is_bytes(value)

    @pytest.mark.parametrize("value", ["abc", None, [1, 2], 3])
    def test_is_not_bytes(self, value):
        assert not validators.is_bytes(value)

    def test_is_integer_rejects_booleans(self):
        assert validators.is_integer(0)
        assert not validators.is_integer(True)
        assert not validators.is_integer(1.5)

    @pytest.mark.parametrize(
        "uid, expected",
        [("alice", True), ("a" * 128, True), ("a" * 129, False), ("", False), (5, False), (None, False)],
    )
    def test_is_uid(self, uid, expected):
        assert validators.is_uid(uid) is expected

    @pytest.mark.parametrize(
        "email, expected",
        [("user@example.com", True), ("user@", False), ("@domain.com", False), ("no-at", False), ("a b@c.d", False)],
    )
    def test_is_email(self, email, expected):
        assert validators.is_email(email) is expected

    @pytest.mark.parametrize(
        "phone, expected",
        [("+15555550100", True), ("+1 (555) 555-0100", True), ("15555550100", False), ("+", False), ("", False)],
    )
    def test_is_phone_number(self, phone, expected):
        assert validators.is_phone_number(phone) is expected

    @pytest.mark.parametrize(
        "url, expected",
        [("https://example.com/a.png", True), ("http://x.io", True), ("ftp://x.io", False), ("example.com", False)],
    )
    def test_is_url(self, url, expected):
        assert validators.is_url(url) is expected


class TestUtcDateString:
    def test_accepts_exact_http_date(self):
        assert validators.is_utc_date_string("Tue, 15 Oct 2019 12:00:00 GMT")

    @pytest.mark.parametrize(
        "value",
        [
            "Mon, 15 Oct 2019 12:00:00 GMT",
            "Tue, 15 Oct 2019 12:00:00 +0000",
            "Tue, 15 Oct 2019 12:00 GMT",
            "2019-10-15T12:00:00Z",
            "",
            None,
        ],
    )
    def test_rejects_other_formats(self, value):
        assert not validators.is_utc_date_string(value)

    def test_iso_date_string(self):
        assert validators.is_iso_date_string("2019-10-15T12:00:00.000Z")
        assert not validators.is_iso_date_string("soon")


class TestValidateUploadAccountUser:
    def test_valid_user_passes(self):
        user = UploadAccountUser(
            local_id="alice",
            email="alice@example.com",
            email_verified=True,
            phone_number="+15555550100",
            photo_url="https://example.com/a.png",
            custom_attributes='{"role":"admin"}',
            created_at=1571140800000,
            provider_user_info=[ProviderUserInfo(provider_id="google.com", raw_id="g-1")],
            mfa_info=[
                AuthFactorInfo(mfa_enrollment_id="f1", phone_info="+15555550101",
                               enrolled_at="2019-10-15T12:00:00.000Z"),
                AuthFactorInfo(mfa_enrollment_id="f2", totp_info=TotpInfo(shared_secret_key="K")),
            ],
        )
        validators.validate_upload_account_user(user)

    @pytest.mark.parametrize(
        "fields, code",
        [
            ({"local_id": ""}, ErrorCode.INVALID_UID),
            ({"email": "nope"}, ErrorCode.INVALID_EMAIL),
            ({"email_verified": "yes"}, ErrorCode.INVALID_EMAIL_VERIFIED),
            ({"display_name": 12}, ErrorCode.INVALID_DISPLAY_NAME),
            ({"disabled": 0}, ErrorCode.INVALID_DISABLED_FIELD),
            ({"phone_number": "555"}, ErrorCode.INVALID_PHONE_NUMBER),
            ({"photo_url": "not a url"}, ErrorCode.INVALID_PHOTO_URL),
            ({"custom_attributes": "[1]"}, ErrorCode.INVALID_CLAIMS),
            ({"custom_attributes": "{"}, ErrorCode.INVALID_CLAIMS),
            ({"custom_attributes": '{"iss":"x"}'}, ErrorCode.FORBIDDEN_CLAIM),
            ({"tenant_id": ""}, ErrorCode.INVALID_TENANT_ID),
        ],
    )
    def test_invalid_fields(self, fields, code):
        user = UploadAccountUser(**{"local_id": "alice", **fields})
        with pytest.raises(UserImportError) as exc_info:
            validators.validate_upload_account_user(user)
        assert exc_info.value.code == code

    def test_claims_size_limit(self):
        claims = '{"blob":"' + "x" * 1000 + '"}'
        user = UploadAccountUser(local_id="alice", custom_attributes=claims)
        with pytest.raises(UserImportError) as exc_info:
            validators.validate_upload_account_user(user)
        assert exc_info.value.code == ErrorCode.CLAIMS_TOO_LARGE

    def test_provider_uid_is_required(self):
        user = UploadAccountUser(
            local_id="alice",
            provider_user_info=[ProviderUserInfo(provider_id="google.com")],
        )
        with pytest.raises(UserImportError, match='"google.com"') as exc_info:
            validators.validate_upload_account_user(user)
        assert exc_info.value.code == ErrorCode.INVALID_PROVIDER_UID

    def test_phone_factor_needs_phone_number(self):
        user = UploadAccountUser(local_id="alice", mfa_info=[AuthFactorInfo(mfa_enrollment_id="f1")])
        with pytest.raises(UserImportError) as exc_info:
            validators.validate_upload_account_user(user)
        assert exc_info.value.code == ErrorCode.INVALID_PHONE_NUMBER
