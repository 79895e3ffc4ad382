"""Tests for envelope, guest, voucher and site models."""

import pytest
from pydantic import ValidationError

from unifi_client.models import (
    ActiveGuest,
    ApiResponse,
    AuthorizeGuestRequest,
    CreateVoucherRequest,
    InactiveGuest,
    NewGuest,
    Site,
    Voucher,
    VoucherStatus,
    parse_guest_entries,
    parse_guest_entry,
)

BASE_GUEST = {
    "_id": "g1",
    "authorized_by": "api",
    "end": 1700003600,
    "mac": "aa:bb:cc:dd:ee:ff",
    "site_id": "s1",
    "start": 1700000000,
}


class TestEnvelope:
    """Tests for ApiResponse."""

    def test_ok_envelope(self):
        """Test rc=ok is recognised and data is kept untyped."""
        envelope = ApiResponse.model_validate({"meta": {"rc": "ok"}, "data": [{"x": 1}]})
        assert envelope.meta.is_ok
        assert envelope.data == [{"x": 1}]

    def test_error_envelope(self):
        """Test an error envelope keeps the message and extra meta fields."""
        envelope = ApiResponse.model_validate(
            {"meta": {"rc": "error", "msg": "api.err.NoSiteContext", "count": 0}}
        )
        assert not envelope.meta.is_ok
        assert envelope.meta.msg == "api.err.NoSiteContext"
        assert envelope.data is None

    def test_meta_required(self):
        """Test a body without meta is rejected."""
        with pytest.raises(ValidationError):
            ApiResponse.model_validate({"data": []})


class TestGuestEntry:
    """Tests for shape-based guest entry decoding."""

    def test_active_guest(self):
        """Test expired plus traffic counters decode as an active guest."""
        guest = parse_guest_entry(
            dict(BASE_GUEST, expired=False, bytes=0, rx_bytes=10, tx_bytes=20)
        )
        assert isinstance(guest, ActiveGuest)
        assert guest.is_expired is False
        assert guest.was_unauthorized is False
        assert guest.expires_at == 1700003600

    def test_inactive_guest(self):
        """Test expired without traffic counters decodes as inactive."""
        guest = parse_guest_entry(dict(BASE_GUEST, expired=True, unauthorized_by="admin"))
        assert isinstance(guest, InactiveGuest)
        assert guest.is_expired is True
        assert guest.was_unauthorized is True

    def test_partial_traffic_counters_are_inactive(self):
        """Test counters must all be present for an active guest."""
        guest = parse_guest_entry(dict(BASE_GUEST, expired=False, rx_bytes=10))
        assert isinstance(guest, InactiveGuest)
        assert guest.was_unauthorized is False

    def test_new_guest(self):
        """Test an entry without expired decodes as a new authorization."""
        guest = parse_guest_entry(dict(BASE_GUEST))
        assert isinstance(guest, NewGuest)
        assert guest.id == "g1"
        assert guest.is_expired is False

    def test_dump_uses_wire_names(self):
        """Test dumps keep _id and leave out the internal variant tag."""
        guest = parse_guest_entry(dict(BASE_GUEST, expired=True))
        dumped = guest.model_dump(by_alias=True)
        assert dumped["_id"] == "g1"
        assert "kind" not in dumped

    def test_list(self):
        """Test a mixed list keeps its order."""
        guests = parse_guest_entries(
            [dict(BASE_GUEST), dict(BASE_GUEST, expired=False)]
        )
        assert [type(g) for g in guests] == [NewGuest, InactiveGuest]

    def test_missing_required_field(self):
        """Test entries without a MAC are rejected."""
        entry = dict(BASE_GUEST)
        del entry["mac"]
        with pytest.raises(ValidationError):
            parse_guest_entry(entry)


class TestAuthorizeGuestRequest:
    """Tests for AuthorizeGuestRequest."""

    def test_payload_excludes_unset(self):
        """Test unset limits are left out and MACs are lowercased."""
        request = AuthorizeGuestRequest(mac=" AA:BB:CC:DD:EE:FF ", minutes=30)
        assert request.to_payload() == {
            "cmd": "authorize-guest",
            "mac": "aa:bb:cc:dd:ee:ff",
            "minutes": 30,
            "ap_mac": "00:00:00:00:00:00",
        }

    def test_negative_limit_rejected(self):
        """Test negative limits fail validation."""
        with pytest.raises(ValidationError):
            AuthorizeGuestRequest(mac="aa:bb:cc:dd:ee:ff", down=-5)


class TestVoucher:
    """Tests for voucher models."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("VALID_ONE", VoucherStatus.VALID_ONE),
            ("valid_multi", VoucherStatus.VALID_MULTI),
            ("valid", VoucherStatus.VALID_ONE),
            ("Used", VoucherStatus.USED),
            ("EXPIRED", VoucherStatus.EXPIRED),
        ],
    )
    def test_status_normalization(self, raw, expected):
        """Test statuses are matched regardless of case."""
        assert VoucherStatus(raw) is expected

    def test_unknown_status(self):
        """Test unknown statuses are rejected."""
        with pytest.raises(ValueError):
            VoucherStatus("REVOKED")

    def test_voucher_str(self):
        """Test the display form shows code and status."""
        voucher = Voucher.model_validate(
            {
                "_id": "v1",
                "code": "1234567890",
                "create_time": 1700000000,
                "duration": 60,
                "quota": 1,
                "status": "valid",
                "used": 0,
            }
        )
        assert str(voucher) == "Code: 1234567890 (VALID_ONE)"

    def test_create_request_converts_megabytes(self):
        """Test a megabyte quota is sent in bytes."""
        request = CreateVoucherRequest.build(count=2, minutes=60, mb_quota=2)
        assert request.to_payload() == {
            "cmd": "create-voucher",
            "n": 2,
            "minutes": 60,
            "bytes": 2 * 1024 * 1024,
        }


class TestSite:
    """Tests for Site."""

    def test_defaults(self):
        """Test description defaults to empty."""
        site = Site.model_validate({"_id": "s1", "name": "default"})
        assert site.desc == ""
        assert str(site) == " (default)"
