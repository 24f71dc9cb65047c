import random

from ladder.utils.trash_talk import generate_trash_talk, trash_talk_options


def test_regular_result_uses_base_messages():
    options = trash_talk_options("Alice", "Bob", 20, 11, 8)
    assert len(options) == 8
    assert all("Alice" in message and "Bob" in message for message in options)
    assert all("11-8" in message and "(+20 ELO)" in message for message in options)


def test_upset_adds_upset_message():
    options = trash_talk_options("Alice", "Bob", 26, 11, 9)
    assert len(options) == 9
    assert any("UPSET ALERT" in message for message in options)


def test_upset_threshold_is_exclusive():
    options = trash_talk_options("Alice", "Bob", 25, 11, 9)
    assert not any("UPSET ALERT" in message for message in options)


def test_blowout_adds_destruction_message():
    options = trash_talk_options("Alice", "Bob", 10, 11, 3)
    assert any("TOTAL DESTRUCTION" in message for message in options)

    options = trash_talk_options("Alice", "Bob", 10, 11, 4)
    assert not any("TOTAL DESTRUCTION" in message for message in options)

    options = trash_talk_options("Alice", "Bob", 10, 21, 2)
    assert not any("TOTAL DESTRUCTION" in message for message in options)


def test_upset_blowout_has_both_messages():
    options = trash_talk_options("Alice", "Bob", 40, 11, 0)
    assert len(options) == 10


def test_generate_is_deterministic_with_seeded_rng():
    first = generate_trash_talk("Alice", "Bob", 30, 11, 2, rng=random.Random(7))
    second = generate_trash_talk("Alice", "Bob", 30, 11, 2, rng=random.Random(7))
    assert first == second
    assert first in trash_talk_options("Alice", "Bob", 30, 11, 2)
