from royalty_docs.services.contract_meta import (
    META_END,
    META_START,
    ContractDetails,
    decode_notes,
    encode_notes,
)


def full_details(**overrides):
    data = dict(
        agreement_reference_no="WR-2024-0001",
        effective_date="2024-03-01",
        delivery_date="2024-06-14",
        isrc="FRX202400001",
        song_titles="Night Drive / Morning Light",
        artist_legal_name="Nova Martin",
        artist_phone="+33 6 12 34 56 78",
        artist_address="12 Rue des Lilas\nParis",
    )
    data.update(overrides)
    return ContractDetails(**data)


class TestEncodeDecode:
    def test_details_and_notes_survive(self):
        details = full_details()
        encoded = encode_notes(details, "Advance paid in two parts.")

        assert encoded.startswith(META_START)
        assert decode_notes(encoded) == (details, "Advance paid in two parts.")

    def test_end_marker_inside_a_value(self):
        details = full_details(song_titles=f"weird {META_END} title", isrc="a/b\\/c")
        encoded = encode_notes(details, "notes")

        assert decode_notes(encoded) == (details, "notes")

    def test_markers_inside_user_notes(self):
        notes = f"see {META_START}{{}}{META_END} below\nsecond line"
        encoded = encode_notes(full_details(), notes)

        assert decode_notes(encoded) == (full_details(), notes)

    def test_empty_strings(self):
        details = full_details(isrc="", artist_phone="")
        assert decode_notes(encode_notes(details, "")) == (details, "")

    def test_notes_keep_leading_newlines_after_the_first(self):
        encoded = encode_notes(full_details(), "\n\nindented")
        assert decode_notes(encoded)[1] == "\n\nindented"

    def test_non_ascii_text(self):
        details = full_details(artist_legal_name="Zoë Ðurić")
        assert decode_notes(encode_notes(details, "Éte"))[0].artist_legal_name == "Zoë Ðurić"

    def test_mapping_input_uses_wire_keys(self):
        encoded = encode_notes({"agreementReferenceNo": "REF-1", "isrc": "X"}, "")
        details, notes = decode_notes(encoded)

        assert details.agreement_reference_no == "REF-1"
        assert details.isrc == "X"
        assert notes == ""


class TestPlainNotes:
    def test_empty_details_leave_notes_untouched(self):
        assert encode_notes(ContractDetails(), "just text") == "just text"
        assert encode_notes(None, None) == ""

    def test_notes_looking_like_a_block_are_wrapped(self):
        notes = f"{META_START}not really metadata"
        encoded = encode_notes(ContractDetails(), notes)

        assert encoded != notes
        assert decode_notes(encoded) == (ContractDetails(), notes)

    def test_plain_notes_decode_to_empty_details(self):
        assert decode_notes("Call the manager first.") == (ContractDetails(), "Call the manager first.")

    def test_none_and_empty(self):
        assert decode_notes(None) == (ContractDetails(), "")
        assert decode_notes("") == (ContractDetails(), "")


class TestMalformedBlocks:
    def test_missing_end_marker(self):
        raw = f'{META_START}{{"isrc": "X"}} and then nothing'
        assert decode_notes(raw) == (ContractDetails(), raw)

    def test_invalid_json(self):
        raw = f"{META_START}{{isrc: X{META_END}\nnotes"
        assert decode_notes(raw) == (ContractDetails(), raw)

    def test_json_that_is_not_an_object(self):
        raw = f"{META_START}[1, 2]{META_END}\nnotes"
        assert decode_notes(raw) == (ContractDetails(), raw)

    def test_block_not_at_start_is_plain_text(self):
        raw = f' {META_START}{{"isrc": "X"}}{META_END}'
        assert decode_notes(raw) == (ContractDetails(), raw)

    def test_unknown_keys_are_ignored(self):
        raw = f'{META_START}{{"isrc": "X", "futureField": 1}}{META_END}\nnotes'
        details, notes = decode_notes(raw)

        assert details == ContractDetails(isrc="X")
        assert notes == "notes"

    def test_non_string_values_are_coerced(self):
        raw = f'{META_START}{{"isrc": 12345, "songTitles": null}}{META_END}'
        details, notes = decode_notes(raw)

        assert details.isrc == "12345"
        assert details.song_titles == ""
        assert notes == ""
