import string
from datetime import timedelta
from unittest import mock

import pytest

from utils.classroom_store import MemoryClassroomStore


WORDS = ['cat', 'dog', 'fish']


@pytest.fixture
def classroom(memory_store):
    return memory_store.create_classroom('Unit1', WORDS)


@pytest.fixture
def alice_and_bob(memory_store, classroom):
    memory_store.add_student(classroom.code, 'Alice')
    memory_store.add_student(classroom.code, 'Bob')
    return classroom.code


def test_create_classroom_code_shape(memory_store):
    alphabet = set(string.ascii_uppercase + string.digits)
    codes = set()
    for _ in range(50):
        classroom = memory_store.create_classroom('Unit', WORDS)
        assert len(classroom.code) == 4
        assert set(classroom.code) <= alphabet
        codes.add(classroom.code)
    assert len(codes) == 50
    assert len(memory_store) == 50


def test_create_classroom_sets_expiry(memory_store, clock, classroom):
    assert classroom.word_count == 3
    assert classroom.expires_at == clock() + timedelta(hours=24)
    assert classroom.students == []


def test_expired_classroom_is_absent(memory_store, clock, classroom):
    clock.advance(hours=23, minutes=59)
    assert memory_store.get_classroom(classroom.code) is not None

    clock.advance(minutes=1)
    assert memory_store.get_classroom(classroom.code) is None
    assert memory_store.add_student(classroom.code, 'Alice') is None
    assert memory_store.get_leaderboard(classroom.code) is None


def test_purge_expired_removes_only_expired(memory_store, clock):
    old = memory_store.create_classroom('Old', WORDS)
    clock.advance(hours=12)
    fresh = memory_store.create_classroom('Fresh', WORDS)
    clock.advance(hours=12)

    assert memory_store.purge_expired() == 1
    assert memory_store.get_classroom(old.code) is None
    assert memory_store.get_classroom(fresh.code) is not None


def test_join_copies_deck_independently(memory_store, alice_and_bob):
    code = alice_and_bob
    assert memory_store.get_student_words(code, 'Alice') == WORDS
    assert memory_store.get_student_words(code, 'Bob') == WORDS

    classroom = memory_store.get_classroom(code)
    alice = classroom.find_student('Alice')
    alice.words.remove('cat')

    assert memory_store.get_student_words(code, 'Bob') == WORDS
    assert classroom.words == WORDS


def test_rejoin_returns_existing_student(memory_store, classroom, clock):
    first = memory_store.add_student(classroom.code, 'Alice')
    memory_store.record_practice_result(classroom.code, 'Alice', 'cat', True)
    memory_store.start_session(classroom.code, 'Alice')
    clock.advance(seconds=30)
    memory_store.end_session(classroom.code, 'Alice')

    again = memory_store.add_student(classroom.code, 'Alice')

    assert again is first
    assert len(memory_store.get_classroom(classroom.code).students) == 1
    assert again.total_time == 30
    assert again.word_stats == {'cat': {'correct': 1, 'wrong': 0}}


def test_names_are_case_sensitive(memory_store, classroom):
    memory_store.add_student(classroom.code, 'alice')
    memory_store.add_student(classroom.code, 'Alice')
    assert len(memory_store.get_classroom(classroom.code).students) == 2


def test_end_session_without_start_is_noop(memory_store, alice_and_bob):
    assert memory_store.end_session(alice_and_bob, 'Alice') is None
    status = memory_store.get_student_status(alice_and_bob, 'Alice')
    assert status['total_time'] == 0


def test_session_credits_elapsed_time_and_reorders(memory_store, clock, alice_and_bob):
    code = alice_and_bob
    assert memory_store.start_session(code, 'Bob') is True
    clock.advance(seconds=95)
    assert memory_store.end_session(code, 'Bob') == 95

    leaderboard = memory_store.get_leaderboard(code)
    assert [entry['name'] for entry in leaderboard] == ['Bob', 'Alice']
    assert leaderboard[0]['rank'] == 1
    assert leaderboard[0]['total_minutes'] == 1
    assert leaderboard[0]['total_seconds'] == 35

    memory_store.start_session(code, 'Alice')
    clock.advance(seconds=200)
    memory_store.end_session(code, 'Alice')

    leaderboard = memory_store.get_leaderboard(code)
    assert [entry['name'] for entry in leaderboard] == ['Alice', 'Bob']
    assert [entry['rank'] for entry in leaderboard] == [1, 2]


def test_leaderboard_ties_keep_join_order(memory_store, alice_and_bob):
    memory_store.add_student(alice_and_bob, 'Carol')
    leaderboard = memory_store.get_leaderboard(alice_and_bob)
    assert [entry['name'] for entry in leaderboard] == ['Alice', 'Bob', 'Carol']
    assert [entry['rank'] for entry in leaderboard] == [1, 2, 3]


def test_restart_discards_running_interval(memory_store, clock, alice_and_bob):
    code = alice_and_bob
    memory_store.start_session(code, 'Alice')
    clock.advance(seconds=60)
    memory_store.start_session(code, 'Alice')
    clock.advance(seconds=10)
    assert memory_store.end_session(code, 'Alice') == 10
    assert memory_store.get_student_status(code, 'Alice')['total_time'] == 10


def test_student_status(memory_store, clock, alice_and_bob):
    code = alice_and_bob
    memory_store.start_session(code, 'Bob')

    status = memory_store.get_student_status(code, 'Bob')
    assert status == {
        'name': 'Bob',
        'total_time': 0,
        'is_active': True,
        'rank': 2,
        'total_students': 2,
    }
    assert memory_store.get_student_status(code, 'Nobody') is None
    assert memory_store.get_student_status('ZZZZ', 'Bob') is None


def test_swap_scenario(memory_store, alice_and_bob):
    code = alice_and_bob
    result = memory_store.swap_words(code, 'Alice', 'cat', 'Bob', 'fish')

    assert result == {'success': True}
    assert memory_store.get_student_words(code, 'Alice') == ['fish', 'dog']
    assert memory_store.get_student_words(code, 'Bob') == ['dog', 'cat']


def test_swap_round_trip_restores_decks(memory_store, alice_and_bob):
    code = alice_and_bob
    classroom = memory_store.get_classroom(code)
    classroom.find_student('Alice').words = ['apple', 'bread', 'cheese']
    classroom.find_student('Bob').words = ['xylophone', 'yacht', 'zebra']

    memory_store.swap_words(code, 'Alice', 'bread', 'Bob', 'zebra')
    assert memory_store.get_student_words(code, 'Alice') == ['apple', 'zebra', 'cheese']
    assert memory_store.get_student_words(code, 'Bob') == ['xylophone', 'yacht', 'bread']

    memory_store.swap_words(code, 'Bob', 'bread', 'Alice', 'zebra')
    assert memory_store.get_student_words(code, 'Alice') == ['apple', 'bread', 'cheese']
    assert memory_store.get_student_words(code, 'Bob') == ['xylophone', 'yacht', 'zebra']


@pytest.mark.parametrize(
    'student_a, word_a, student_b, word_b, error',
    [
        ('Alice', 'owl', 'Bob', 'fish', "Alice does not own the word 'owl'"),
        ('Alice', 'cat', 'Bob', 'owl', "Bob does not own the word 'owl'"),
        ('Alice', 'cat', 'Nobody', 'fish', 'One or both students not found'),
        ('Alice', 'cat', 'Alice', 'dog', 'Cannot swap words with yourself'),
    ],
)
def test_failed_swap_leaves_decks_unchanged(
    memory_store, alice_and_bob, student_a, word_a, student_b, word_b, error
):
    code = alice_and_bob
    result = memory_store.swap_words(code, student_a, word_a, student_b, word_b)

    assert result == {'success': False, 'error': error}
    assert memory_store.get_student_words(code, 'Alice') == WORDS
    assert memory_store.get_student_words(code, 'Bob') == WORDS


def test_record_practice_increments_one_counter(memory_store, alice_and_bob):
    code = alice_and_bob
    result = memory_store.record_practice_result(code, 'Alice', 'dog', True)
    assert result == {'success': True, 'stats': {'correct': 1, 'wrong': 0}}

    result = memory_store.record_practice_result(code, 'Alice', 'dog', False)
    assert result['stats'] == {'correct': 1, 'wrong': 1}


def test_record_practice_rejects_unowned_word(memory_store, alice_and_bob):
    code = alice_and_bob
    result = memory_store.record_practice_result(code, 'Alice', 'owl', True)

    assert result == {'success': False, 'error': 'Student does not have that word'}
    student = memory_store.get_classroom(code).find_student('Alice')
    assert student.word_stats == {}


def test_custom_ttl():
    store = MemoryClassroomStore(ttl=timedelta(minutes=5))
    classroom = store.create_classroom('Short', WORDS)
    assert classroom.expires_at - classroom.created_at == timedelta(minutes=5)


def test_create_classroom_skips_codes_taken_elsewhere(memory_store):
    used_elsewhere = {'AAAA'}
    with mock.patch('utils.classroom_store.generate_code', side_effect=['AAAA', 'BBBB']):
        classroom = memory_store.create_classroom('Unit', WORDS, is_taken=used_elsewhere.__contains__)
    assert classroom.code == 'BBBB'
