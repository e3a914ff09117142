# tests/unit/test_topic_filter.py
from recording.topic_filter import FilterMode, FilterPolicy, resolve


def test_wildcard_selects_everything():
    assert resolve(["*"]) == FilterPolicy.everything()
    assert resolve(["*"]).mode is FilterMode.EVERYTHING


def test_wildcard_dominates_trailing_names():
    assert resolve(["*", "/foo"]) == FilterPolicy.everything()


def test_allow_list_preserves_order():
    policy = resolve(["/b", "/a", "/c"])
    assert policy.mode is FilterMode.ALLOW_LIST
    assert policy.names == ("/b", "/a", "/c")


def test_wildcard_only_counts_in_first_position():
    policy = resolve(["/a", "*"])
    assert policy.mode is FilterMode.ALLOW_LIST
    assert policy.names == ("/a", "*")


def test_matches():
    allow = resolve(["/a", "/b"])
    assert allow.matches("/a")
    assert not allow.matches("/c")
    assert resolve(["*"]).matches("/anything")


def test_record_options_for_everything_carry_no_names():
    options = resolve(["*", "/ignored"]).to_record_options()
    assert options.all_topics is True
    assert options.topics == []


def test_record_options_for_allow_list():
    options = resolve(["/a", "/b"]).to_record_options()
    assert options.all_topics is False
    assert options.topics == ["/a", "/b"]
    assert options.rmw_serialization_format == "cdr"
    assert options.topic_polling_interval_ms == 1000


def test_describe():
    assert resolve(["*"]).describe() == "*"
    assert resolve(["/a", "/b"]).describe() == "/a /b"
