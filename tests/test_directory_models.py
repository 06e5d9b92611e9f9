"""Tests for fleetadmin.directory.models and fleetadmin.membership.search."""

from conftest import make_device, make_user

from fleetadmin.directory.models import MutationResult, Principal, PrincipalKind
from fleetadmin.membership.search import filter_members


class TestPrincipalKind:
    """Tests for PrincipalKind."""

    def test_csv_columns(self):
        assert PrincipalKind.USER.csv_column == "EmailAddress"
        assert PrincipalKind.DEVICE.csv_column == "DeviceName"

    def test_odata_types(self):
        assert PrincipalKind.USER.odata_type == "#microsoft.graph.user"
        assert PrincipalKind.DEVICE.odata_type == "#microsoft.graph.device"


class TestPrincipal:
    """Tests for Principal lookup keys and descriptions."""

    def test_user_key_is_lower_cased_upn(self):
        user = make_user("Alice.Smith@Contoso.com", mail="alice@other.com")
        assert user.lookup_key == "alice.smith@contoso.com"

    def test_user_without_upn_has_no_key(self):
        user = make_user(None, mail="guest@partner.com")
        assert user.lookup_key is None

    def test_device_key_is_lower_cased_name(self):
        assert make_device("KIOSK-01").lookup_key == "kiosk-01"

    def test_device_without_name_has_no_key(self):
        assert make_device(None).lookup_key is None

    def test_user_describe_full(self):
        user = Principal(
            id="u1",
            display_name="Alice Smith",
            kind=PrincipalKind.USER,
            upn="asmith@contoso.com",
            mail="alice.smith@contoso.com",
            employee_id="1042",
            department="Nursing",
        )
        assert user.describe() == (
            "Alice Smith | asmith@contoso.com | alice.smith@contoso.com | #1042 | Nursing"
        )

    def test_user_describe_skips_mail_equal_to_upn(self):
        user = make_user("a@x.com", mail="A@X.com")
        assert user.describe() == "A | a@x.com"

    def test_device_describe_unknown_trust_type(self):
        device = make_device("PC-9", trust_type="Something")
        assert device.describe() == "PC-9 | Something"

    def test_device_describe_hybrid(self):
        device = make_device("PC-9", trust_type="ServerAd")
        assert device.describe() == "PC-9 | Hybrid joined"


class TestMutationResult:
    """Tests for MutationResult."""

    def test_success(self):
        result = MutationResult.success()
        assert result.ok is True
        assert result.error is None

    def test_failure(self):
        result = MutationResult.failure("Resource not found")
        assert result.ok is False
        assert result.error == "Resource not found"


class TestFilterMembers:
    """Tests for filter_members."""

    def _members(self):
        return [
            make_user("zoe@x.com", display_name="Zoe Park", department="Pharmacy"),
            make_user("adam@x.com", display_name="Adam Cole"),
            make_user("kiosk.front@x.com", display_name="Front Desk Kiosk"),
        ]

    def test_no_term_returns_all_sorted(self):
        names = [p.display_name for p in filter_members(self._members())]
        assert names == ["Adam Cole", "Front Desk Kiosk", "Zoe Park"]

    def test_partial_match_on_display_name(self):
        names = [p.display_name for p in filter_members(self._members(), "kIoSk")]
        assert names == ["Front Desk Kiosk"]

    def test_partial_match_on_attributes(self):
        names = [p.display_name for p in filter_members(self._members(), "pharm")]
        assert names == ["Zoe Park"]

    def test_no_match(self):
        assert filter_members(self._members(), "nothing-like-this") == []

    def test_devices_by_name(self):
        devices = [make_device("KIOSK-01"), make_device("LAB-PC-2")]
        assert [d.device_name for d in filter_members(devices, "lab")] == ["LAB-PC-2"]
