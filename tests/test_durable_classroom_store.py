import string
from unittest import mock

import pytest

from core.exceptions import (
    ClassroomCodeGenerationError,
    ClassroomNotFoundError,
    StudentNotFoundError,
)
from models.student import StudentModel
from models.study_session import StudySessionModel


WORDS = ['cat', 'dog', 'fish']


@pytest.fixture
def classroom(durable_store):
    return durable_store.create_classroom('Unit1', WORDS, 'teacher-1', 'teacher@example.com')


@pytest.fixture
def classroom_id(durable_store, classroom):
    durable_store.add_student(classroom.id, 'Alice', 'student-1', 'alice@example.com')
    durable_store.add_student(classroom.id, 'Bob')
    return classroom.id


def test_create_classroom(durable_store, classroom):
    alphabet = set(string.ascii_uppercase + string.digits)
    assert len(classroom.code) == 4
    assert set(classroom.code) <= alphabet
    assert classroom.words == WORDS
    assert classroom.word_count == 3
    assert classroom.is_public is True
    assert classroom.mode == 'authenticated'
    assert durable_store.get_classroom_by_code(classroom.code).id == classroom.id


def test_code_generation_gives_up_after_bounded_attempts(durable_store, classroom):
    with mock.patch(
        'utils.durable_classroom_store.generate_code', return_value=classroom.code
    ) as generate:
        with pytest.raises(ClassroomCodeGenerationError):
            durable_store.create_classroom('Clash', WORDS, 'teacher-1')
    assert generate.call_count == 10


def test_code_generation_retries_on_collision(durable_store, classroom):
    with mock.patch(
        'utils.durable_classroom_store.generate_code',
        side_effect=[classroom.code, classroom.code, 'NEW1'],
    ):
        created = durable_store.create_classroom('Second', WORDS, 'teacher-1')
    assert created.code == 'NEW1'


def test_rejoin_returns_existing_student(durable_store, classroom_id):
    durable_store.record_practice(classroom_id, 'Alice', 'cat', True)

    again = durable_store.add_student(classroom_id, 'Alice')
    by_user = durable_store.add_student(classroom_id, 'Alicia', 'student-1')

    assert again.id == by_user.id
    assert again.word_stats == {'cat': {'correct': 1, 'wrong': 0}}
    assert len(durable_store.get_leaderboard(classroom_id)) == 2


def test_add_student_to_missing_classroom(durable_store):
    with pytest.raises(ClassroomNotFoundError):
        durable_store.add_student('missing', 'Alice')


def test_end_session_without_start_is_noop(durable_store, classroom_id):
    assert durable_store.end_session(classroom_id, 'Alice') is None
    assert durable_store.get_student_status(classroom_id, 'Alice')['total_time'] == 0


def test_end_session_records_history(durable_store, db_session, clock, classroom_id):
    assert durable_store.start_session(classroom_id, 'Bob') is True
    clock.advance(seconds=125)
    assert durable_store.end_session(classroom_id, 'Bob') == 125

    status = durable_store.get_student_status(classroom_id, 'Bob')
    assert status == {
        'name': 'Bob',
        'total_time': 125,
        'is_active': False,
        'rank': 1,
        'total_students': 2,
    }
    sessions = db_session.query(StudySessionModel).all()
    assert len(sessions) == 1
    assert sessions[0].duration == 125
    assert sessions[0].words_studied == WORDS


def test_start_session_unknown_student(durable_store, classroom_id):
    assert durable_store.start_session(classroom_id, 'Nobody') is False


def test_leaderboard_order_and_ties(durable_store, clock, classroom_id):
    durable_store.add_student(classroom_id, 'Carol')
    leaderboard = durable_store.get_leaderboard(classroom_id)
    assert [e['name'] for e in leaderboard] == ['Alice', 'Bob', 'Carol']

    durable_store.start_session(classroom_id, 'Carol')
    clock.advance(seconds=10)
    durable_store.end_session(classroom_id, 'Carol')

    leaderboard = durable_store.get_leaderboard(classroom_id)
    assert [e['name'] for e in leaderboard] == ['Carol', 'Alice', 'Bob']
    assert [e['rank'] for e in leaderboard] == [1, 2, 3]


def test_swap_scenario(durable_store, classroom_id):
    result = durable_store.swap_words(classroom_id, 'Alice', 'cat', 'Bob', 'fish')

    assert result == {'success': True}
    assert durable_store.get_student_words(classroom_id, 'Alice') == ['fish', 'dog']
    assert durable_store.get_student_words(classroom_id, 'Bob') == ['dog', 'cat']


def test_failed_swap_leaves_decks_unchanged(durable_store, classroom_id):
    result = durable_store.swap_words(classroom_id, 'Alice', 'owl', 'Bob', 'fish')

    assert result == {'success': False, 'error': "Alice does not own the word 'owl'"}
    assert durable_store.get_student_words(classroom_id, 'Alice') == WORDS
    assert durable_store.get_student_words(classroom_id, 'Bob') == WORDS


def test_record_practice(durable_store, classroom_id):
    result = durable_store.record_practice(classroom_id, 'Bob', 'fish', False)
    assert result == {'success': True, 'stats': {'correct': 0, 'wrong': 1}}

    rejected = durable_store.record_practice(classroom_id, 'Bob', 'owl', True)
    assert rejected == {'success': False, 'error': 'Student does not have that word'}

    missing = durable_store.record_practice(classroom_id, 'Nobody', 'fish', True)
    assert missing == {'success': False, 'error': 'Student not found'}


def test_get_my_classrooms_counts_students(durable_store, clock, classroom_id):
    clock.advance(hours=25)
    other = durable_store.create_classroom('Unit2', ['sun'], 'teacher-1')
    durable_store.start_session(classroom_id, 'Alice')
    durable_store.create_classroom('Not mine', ['moon'], 'teacher-2')

    classrooms = durable_store.get_my_classrooms('teacher-1')

    assert [c['id'] for c in classrooms] == [other.id, classroom_id]
    assert classrooms[1]['student_count'] == 2
    assert classrooms[1]['active_student_count'] == 1
    assert classrooms[0]['student_count'] == 0


def test_get_my_participations(durable_store, clock, classroom_id):
    clock.advance(minutes=5)
    second = durable_store.create_classroom('Unit2', ['sun'], 'teacher-2')
    durable_store.add_student(second.id, 'Al', 'student-1')

    durable_store.start_session(classroom_id, 'Bob')
    clock.advance(seconds=30)
    durable_store.end_session(classroom_id, 'Bob')

    participations = durable_store.get_my_participations('student-1')

    assert [p['classroom_id'] for p in participations] == [second.id, classroom_id]
    assert participations[0]['rank'] == 1
    assert participations[0]['total_students'] == 1
    assert participations[1]['student_name'] == 'Alice'
    assert participations[1]['rank'] == 2
    assert participations[1]['total_students'] == 2


def test_get_student_progress(durable_store, clock, classroom_id):
    durable_store.start_session(classroom_id, 'Alice')
    clock.advance(seconds=60)
    durable_store.end_session(classroom_id, 'Alice')

    clock.advance(hours=1)
    durable_store.start_session(classroom_id, 'Alice')
    clock.advance(seconds=40)
    durable_store.end_session(classroom_id, 'Alice')

    clock.advance(days=1)
    durable_store.start_session(classroom_id, 'Alice')
    clock.advance(seconds=20)
    durable_store.end_session(classroom_id, 'Alice')

    for correct in [True, True, True, True, False]:
        durable_store.record_practice(classroom_id, 'Alice', 'cat', correct)
    durable_store.record_practice(classroom_id, 'Alice', 'dog', False)

    progress = durable_store.get_student_progress(classroom_id, 'student-1')

    assert progress['classroom']['name'] == 'Unit1'
    assert progress['student']['total_time'] == 120
    assert progress['student']['rank'] == 1
    assert progress['student']['mastery'] == 50
    assert progress['student']['study_days'] == 2
    assert [s['duration'] for s in progress['sessions']] == [20, 40, 60]
    assert progress['word_stats']['dog'] == {'correct': 0, 'wrong': 1}


def test_get_student_progress_errors(durable_store, classroom_id):
    with pytest.raises(ClassroomNotFoundError):
        durable_store.get_student_progress('missing', 'student-1')
    with pytest.raises(StudentNotFoundError):
        durable_store.get_student_progress(classroom_id, 'stranger')


def test_swap_round_trip_restores_decks(durable_store, db_session, classroom_id):
    students = db_session.query(StudentModel).filter_by(classroom_id=classroom_id)
    students.filter_by(name='Alice').one().words = ['apple', 'bread', 'cheese']
    students.filter_by(name='Bob').one().words = ['xylophone', 'yacht', 'zebra']
    db_session.commit()

    durable_store.swap_words(classroom_id, 'Alice', 'bread', 'Bob', 'zebra')
    assert durable_store.get_student_words(classroom_id, 'Alice') == ['apple', 'zebra', 'cheese']
    assert durable_store.get_student_words(classroom_id, 'Bob') == ['xylophone', 'yacht', 'bread']

    durable_store.swap_words(classroom_id, 'Bob', 'bread', 'Alice', 'zebra')
    assert durable_store.get_student_words(classroom_id, 'Alice') == ['apple', 'bread', 'cheese']
    assert durable_store.get_student_words(classroom_id, 'Bob') == ['xylophone', 'yacht', 'zebra']


def test_restart_discards_running_interval(durable_store, clock, classroom_id):
    durable_store.start_session(classroom_id, 'Alice')
    clock.advance(seconds=60)
    durable_store.start_session(classroom_id, 'Alice')
    clock.advance(seconds=10)

    assert durable_store.end_session(classroom_id, 'Alice') == 10
    assert durable_store.get_student_status(classroom_id, 'Alice')['total_time'] == 10


def test_create_classroom_skips_codes_taken_elsewhere(durable_store):
    with mock.patch(
        'utils.durable_classroom_store.generate_code', side_effect=['AAAA', 'BBBB']
    ):
        created = durable_store.create_classroom(
            'Unit', WORDS, 'teacher-1', is_taken={'AAAA'}.__contains__
        )
    assert created.code == 'BBBB'
