from alexa_prune.filtering import matches_filter, select_candidates
from alexa_prune.pipeline_types import CandidateRecord, RecordKind


def _entity(ident, description=""):
    return CandidateRecord(kind=RecordKind.ENTITY, identifier=ident, display_name=ident, description=description)


def _endpoint(ident, manufacturer=None, description=""):
    return CandidateRecord(
        kind=RecordKind.ENDPOINT,
        identifier=ident,
        display_name=ident,
        description=description,
        manufacturer=manufacturer,
    )


def test_matches_filter_case_insensitive_substring():
    assert matches_filter("Office Lamp via Home Assistant", "home assistant")
    assert matches_filter("HOME ASSISTANTx", "Home Assistant")
    assert not matches_filter("Office Lamp via Hue", "Home Assistant")


def test_matches_filter_empty_field():
    assert not matches_filter("", "Home Assistant")
    assert not matches_filter(None, "Home Assistant")
    # empty phrase selects everything
    assert matches_filter(None, "")
    assert matches_filter("", "")


def test_select_candidates_keeps_order_on_description():
    records = [
        _entity("e1", "Lamp via Home Assistant"),
        _entity("e2", "Hue bulb"),
        _entity("e3", ""),
        _entity("e4", "Fan via home assistant"),
    ]
    picked = select_candidates(records, "Home Assistant")
    assert [r.identifier for r in picked] == ["e1", "e4"]


def test_select_candidates_on_manufacturer_field():
    records = [
        _endpoint("a", manufacturer="Home Assistant", description="nothing"),
        _endpoint("b", manufacturer=None, description="Home Assistant in description only"),
        _endpoint("c", manufacturer="Philips"),
    ]
    picked = select_candidates(records, "home assistant", field="manufacturer")
    assert [r.identifier for r in picked] == ["a"]
