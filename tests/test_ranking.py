import itertools

import pytest

from lookaround.models import Location, Place, SortMethod
from lookaround.ranking import checkins_ordered_before, sort_places


def make_place(name, friends=None, checkins=None):
    return Place(
        id=name,
        name=name,
        location=Location(37.48, -122.15),
        context_count=friends,
        checkins=checkins,
    )


def names(places):
    return [p.name for p in places]


def test_magic_scenario_friends_then_checkins():
    a = make_place("A", friends=2, checkins=5)
    b = make_place("B", friends=0, checkins=9)
    c = make_place("C", friends=1, checkins=3)
    assert names(sort_places([a, b, c], SortMethod.MAGIC)) == ["A", "C", "B"]


def test_magic_is_default_method():
    places = [make_place("x", 0, 1), make_place("y", 3, 0)]
    assert names(sort_places(places)) == ["y", "x"]


def test_checkins_descending_without_missing_counts():
    places = [make_place(str(n), checkins=n) for n in (3, 10, 1, 7, 7, 0)]
    result = sort_places(places, SortMethod.CHECKINS)
    assert [p.checkins for p in result] == [10, 7, 7, 3, 1, 0]


def test_checkins_ties_keep_input_order():
    first = make_place("first", checkins=4)
    second = make_place("second", checkins=4)
    assert names(sort_places([first, second], SortMethod.CHECKINS)) == ["first", "second"]


def test_checkins_predicate_left_missing_orders_left_first():
    missing = make_place("missing")
    counted = make_place("counted", checkins=100)
    assert checkins_ordered_before(missing, counted) is True


def test_checkins_predicate_right_missing_orders_left_first():
    counted = make_place("counted", checkins=1)
    missing = make_place("missing")
    assert checkins_ordered_before(counted, missing) is True


def test_checkins_predicate_both_missing_is_true():
    assert checkins_ordered_before(make_place("a"), make_place("b")) is True


def test_checkins_predicate_counted_values():
    high = make_place("high", checkins=9)
    low = make_place("low", checkins=2)
    assert checkins_ordered_before(high, low) is True
    assert checkins_ordered_before(low, high) is False
    assert checkins_ordered_before(low, make_place("same", checkins=2)) is False


def test_checkins_legacy_mixed_missing_exact_order():
    places = [
        make_place("na"),
        make_place("one", checkins=1),
        make_place("nine", checkins=9),
        make_place("nb"),
        make_place("five", checkins=5),
    ]
    result = sort_places(places, SortMethod.CHECKINS, missing_checkins="legacy")
    assert names(result) == ["nb", "nine", "five", "one", "na"]


def test_checkins_legacy_counted_places_descending_for_every_ordering():
    base = [
        make_place("na"),
        make_place("one", checkins=1),
        make_place("five", checkins=5),
        make_place("nine", checkins=9),
        make_place("nb"),
    ]
    for ordering in itertools.permutations(base):
        result = sort_places(list(ordering), SortMethod.CHECKINS, missing_checkins="legacy")
        counted = [p.checkins for p in result if p.checkins is not None]
        assert counted == [9, 5, 1]
        assert sorted(names(result)) == sorted(names(base))


def test_checkins_legacy_is_the_default_policy():
    places = [make_place("na"), make_place("one", checkins=1), make_place("nine", checkins=9)]
    assert sort_places(places, SortMethod.CHECKINS) == sort_places(
        places, SortMethod.CHECKINS, missing_checkins="legacy"
    )


def test_magic_suffix_uses_legacy_checkins_order():
    places = [
        make_place("na", friends=0),
        make_place("one", friends=0, checkins=1),
        make_place("friend", friends=2, checkins=0),
        make_place("nine", friends=0, checkins=9),
        make_place("nb", friends=0),
        make_place("five", friends=0, checkins=5),
    ]
    result = sort_places(places, SortMethod.MAGIC, missing_checkins="legacy")
    assert names(result) == ["friend", "nb", "nine", "five", "one", "na"]


def test_checkins_first_policy_puts_missing_ahead():
    places = [
        make_place("a", checkins=4),
        make_place("b"),
        make_place("c", checkins=8),
        make_place("d"),
        make_place("e", checkins=1),
    ]
    result = sort_places(places, SortMethod.CHECKINS, missing_checkins="first")
    assert names(result) == ["b", "d", "c", "a", "e"]


def test_friends_descending_with_missing_last():
    places = [
        make_place("none1"),
        make_place("two", friends=2),
        make_place("zero", friends=0),
        make_place("none2"),
        make_place("five", friends=5),
    ]
    result = sort_places(places, SortMethod.FRIENDS)
    assert names(result) == ["five", "two", "zero", "none1", "none2"]


def test_magic_equals_friends_when_all_have_friends():
    places = [
        make_place("a", friends=1, checkins=50),
        make_place("b", friends=4, checkins=1),
        make_place("c", friends=2),
    ]
    assert sort_places(places, SortMethod.MAGIC) == sort_places(places, SortMethod.FRIENDS)


def test_magic_equals_checkins_when_no_friends():
    places = [
        make_place("a", friends=0, checkins=3),
        make_place("b", friends=0, checkins=12),
        make_place("c", friends=0, checkins=3),
        make_place("d", friends=0, checkins=7),
    ]
    assert sort_places(places, SortMethod.MAGIC) == sort_places(places, SortMethod.CHECKINS)


def test_magic_missing_friend_counts_are_ranked_by_checkins():
    places = [
        make_place("unknown", checkins=40),
        make_place("friend", friends=1, checkins=0),
        make_place("zero", friends=0, checkins=2),
    ]
    result = sort_places(places, SortMethod.MAGIC, missing_checkins="first")
    assert names(result) == ["friend", "unknown", "zero"]


def test_magic_without_zero_boundary_leaves_missing_counts_last():
    places = [make_place("unknown", checkins=99), make_place("friend", friends=3)]
    assert names(sort_places(places, SortMethod.MAGIC)) == ["friend", "unknown"]


def test_sort_places_does_not_mutate_input():
    places = [make_place("a", 1), make_place("b", 3)]
    original = list(places)
    sort_places(places, SortMethod.FRIENDS)
    assert places == original


def test_sort_places_rejects_unknown_policy():
    with pytest.raises(ValueError):
        sort_places([], SortMethod.CHECKINS, missing_checkins="last")


def test_sort_places_empty():
    assert sort_places([], SortMethod.MAGIC) == []
