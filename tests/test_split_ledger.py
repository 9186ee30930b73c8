import json
import logging
from decimal import Decimal

from royalty_docs.services.split_ledger import (
    ContributorDirectory,
    build_ledger,
    check_split_total,
    parse_featured_artists,
    resolve_field,
    snapshot_references,
)
from tests.factories import make_artist, make_contract, make_split, make_user


class TestResolveField:
    def test_first_visible_value_wins(self):
        assert resolve_field([None, "", "  ", "Nova", "Other"]) == "Nova"

    def test_values_are_stripped(self):
        assert resolve_field(["  Nova  "]) == "Nova"

    def test_placeholder_when_nothing(self):
        assert resolve_field([None, " "]) == "-"
        assert resolve_field([], placeholder="n/a") == "n/a"

    def test_non_strings(self):
        assert resolve_field([None, 42]) == "42"


class TestParseFeaturedArtists:
    def test_not_json(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert parse_featured_artists("not json") == []
        assert "not valid JSON" in caplog.text

    def test_not_a_list(self):
        assert parse_featured_artists('{"name": "Nova"}') == []
        assert parse_featured_artists(None) == []
        assert parse_featured_artists("") == []

    def test_skips_non_object_entries(self):
        entries = parse_featured_artists('[{"name": "Nova"}, 3, "x"]')
        assert [e.name for e in entries] == ["Nova"]

    def test_aliases_and_coercion(self):
        raw = json.dumps([{
            "name": "Kai",
            "userId": 7,
            "id": "artist-1",
            "legalName": "Kai Dupont",
            "phoneNumber": "+44",
            "percentage": "12.5",
        }])
        entry = parse_featured_artists(raw)[0]

        assert entry.user_id == "7"
        assert entry.linked_artist_id == "artist-1"
        assert entry.legal_name == "Kai Dupont"
        assert entry.phone_number == "+44"
        assert entry.percentage == Decimal("12.5")

    def test_bad_percentage_is_none(self):
        entry = parse_featured_artists('[{"name": "Kai", "percentage": "lots"}]')[0]
        assert entry.percentage is None


class TestSnapshotLedger:
    def test_snapshot_wins_with_contact_fallbacks(self):
        nova = make_user()
        owner = make_user(
            email="kai@example.com",
            legal_name="Kai Dupont",
            phone_number="+44 20 0000 0000",
            address="2 Baker St, London",
        )
        kai = make_artist(owner=owner, name="Kai")
        contract = make_contract(
            user_id=nova.id,
            user=nova,
            featured_artists=json.dumps([
                {"name": "Nova", "role": "primary", "userId": str(nova.id), "percentage": 60, "legalName": ""},
                {"name": "Kai", "role": "featured", "artistId": str(kai.id), "percentage": 40, "phoneNumber": "+33 1"},
            ]),
        )
        directory = ContributorDirectory.from_contract(contract)
        directory.add_artist(kai)

        ledger = build_ledger(contract, directory)

        assert ledger.source == "snapshot"
        first, second = ledger.contributors
        assert (first.name, first.role, first.percentage_of_artist_share) == ("Nova", "primary", Decimal("60"))
        assert first.legal_name == "Nova Martin"
        assert first.email == "nova@example.com"
        assert second.phone == "+33 1"
        assert second.legal_name == "Kai Dupont"
        assert second.address == "2 Baker St, London"
        assert ledger.primary() is first

    def test_missing_percentage_taken_from_matching_split(self):
        contract = make_contract(
            featured_artists='[{"name": "nova"}, {"name": "Kai"}]',
            splits=[make_split(name="Kai", percentage=Decimal("45")), make_split(name="Nova", percentage=Decimal("55"))],
        )
        ledger = build_ledger(contract)

        assert [c.percentage_of_artist_share for c in ledger.contributors] == [Decimal("55"), Decimal("45")]

    def test_split_rows_are_matched_once(self):
        contract = make_contract(
            featured_artists='[{"name": "Nova"}, {"name": "Nova"}]',
            splits=[make_split(name="Nova", percentage=Decimal("70"))],
        )
        ledger = build_ledger(contract)

        assert [c.percentage_of_artist_share for c in ledger.contributors] == [Decimal("70"), Decimal("0")]

    def test_single_contributor_without_share_gets_everything(self):
        ledger = build_ledger(make_contract(featured_artists='[{"name": "Solo"}]'))
        assert ledger.contributors[0].percentage_of_artist_share == Decimal("100")

    def test_unknown_role_is_featured(self):
        ledger = build_ledger(make_contract(featured_artists='[{"name": "A", "role": "remixer"}]'))
        assert ledger.contributors[0].role == "featured"

    def test_only_one_primary(self, caplog):
        contract = make_contract(featured_artists=json.dumps([
            {"name": "A", "role": "primary", "percentage": 50},
            {"name": "B", "role": "PRIMARY", "percentage": 50},
        ]))
        with caplog.at_level(logging.WARNING):
            ledger = build_ledger(contract)

        assert [c.role for c in ledger.contributors] == ["primary", "featured"]
        assert "more than one primary" in caplog.text

    def test_over_allocation_is_scaled_down(self):
        contract = make_contract(
            artist_share=Decimal("0.7"),
            featured_artists=json.dumps([
                {"name": "A", "percentage": 80},
                {"name": "B", "percentage": 40},
            ]),
        )
        ledger = build_ledger(contract)

        total = sum(c.percentage_of_artist_share for c in ledger.contributors)
        gross = sum(c.share_of_gross(contract.artist_share) for c in ledger.contributors)
        assert total <= Decimal("100")
        assert gross <= Decimal("70") + Decimal("0.01")
        assert ledger.contributors[0].percentage_of_artist_share == Decimal("66.666")

    def test_out_of_range_values_are_clamped(self):
        contract = make_contract(featured_artists=json.dumps([
            {"name": "A", "percentage": -5},
            {"name": "B", "percentage": 250},
        ]))
        ledger = build_ledger(contract)

        assert [c.percentage_of_artist_share for c in ledger.contributors] == [Decimal("0"), Decimal("100")]


class TestSplitRowsLedger:
    def test_malformed_snapshot_falls_back_to_splits(self):
        nova = make_user()
        contract = make_contract(
            user_id=nova.id,
            featured_artists="not json",
            splits=[
                make_split(user=nova, name="Nova", percentage=Decimal("70")),
                make_split(name="Kai", percentage=Decimal("30"), email="kai@example.com"),
            ],
        )
        ledger = build_ledger(contract)

        assert ledger.source == "splits"
        nova_row, kai_row = ledger.contributors
        assert nova_row.role == "primary"
        assert nova_row.phone == "+33 6 12 34 56 78"
        assert kai_row.role == "featured"
        assert kai_row.email == "kai@example.com"
        assert kai_row.legal_name == "-"

    def test_primary_by_linked_artist(self):
        owner = make_user()
        artist = make_artist(owner=owner)
        contract = make_contract(
            artist_id=artist.id,
            splits=[make_split(name="Guest"), make_split(artist=artist, name="")],
        )
        ledger = build_ledger(contract)

        assert [c.role for c in ledger.contributors] == ["featured", "primary"]
        assert ledger.contributors[1].name == "Nova"
        assert ledger.contributors[1].legal_name == "Nova Martin"

    def test_no_contributors(self):
        ledger = build_ledger(make_contract())
        assert ledger.contributors == []
        assert ledger.primary() is None

    def test_unbalanced_splits_are_flagged(self, caplog):
        contract = make_contract(splits=[make_split(percentage=Decimal("60")), make_split(name="B", percentage=Decimal("30"))])
        with caplog.at_level(logging.WARNING):
            ledger = build_ledger(contract)

        assert not ledger.split_check.is_balanced
        assert ledger.split_check.total == Decimal("90")
        assert "expected 100" in caplog.text


class TestCheckSplitTotal:
    def test_balanced(self):
        check = check_split_total([make_split(percentage=Decimal("33.333")), make_split(percentage=Decimal("66.667"))])
        assert check.is_balanced
        assert check.count == 2

    def test_within_tolerance(self):
        check = check_split_total([make_split(percentage=Decimal("99.995"))])
        assert check.is_balanced

    def test_empty_is_not_balanced(self):
        check = check_split_total([])
        assert not check.is_balanced
        assert check.total == Decimal("0")


def test_snapshot_references():
    contract = make_contract(featured_artists=json.dumps([
        {"name": "A", "userId": "u-1"},
        {"name": "B", "id": "a-1"},
        {"name": "C", "artistId": "a-2", "id": "ignored"},
    ]))
    assert snapshot_references(contract) == ({"u-1"}, {"a-1", "a-2"})


def test_directory_adds_artist_owner():
    owner = make_user()
    artist = make_artist(owner=owner)
    directory = ContributorDirectory()
    directory.add_artist(artist)

    assert directory.artist(str(artist.id)) is artist
    assert directory.user(owner.id) is owner
    assert directory.user(None) is None
