from datetime import datetime, timedelta
from unittest import mock

import pytest
from sqlalchemy.exc import IntegrityError

from app import db
from app.jwt_auth import UserContext
from app.models import Competition, CompetitionSubmission, Vote
from app.services.competitions import competition_status, submit_to_competition, cast_vote, UPCOMING, ACTIVE, ENDED

from tests.conftest import ALICE_ID, BOB_ID


@pytest.fixture
def window():
    return Competition(
        title='Window',
        start_date=datetime(2026, 3, 1, 9, 0),
        end_date=datetime(2026, 3, 31, 17, 0),
        is_active=True,
    )


def test_status_before_start_is_upcoming(window):
    assert competition_status(window, now=datetime(2026, 3, 1, 8, 59)) == UPCOMING


def test_status_boundaries_are_inclusive(window):
    assert competition_status(window, now=datetime(2026, 3, 1, 9, 0)) == ACTIVE
    assert competition_status(window, now=datetime(2026, 3, 31, 17, 0)) == ACTIVE


def test_status_after_end_is_ended(window):
    assert competition_status(window, now=datetime(2026, 3, 31, 17, 1)) == ENDED


def test_inactive_competition_inside_window_is_ended(window):
    window.is_active = False

    assert competition_status(window, now=datetime(2026, 3, 15)) == ENDED


def test_list_reports_derived_status(client, make_competition):
    make_competition(start_offset=timedelta(days=3), end_offset=timedelta(days=10), title='Later')
    make_competition(title='Now')

    data = client.get('/api/competitions').get_json()['data']

    statuses = {item['title']: item['status'] for item in data}
    assert statuses == {'Later': UPCOMING, 'Now': ACTIVE}


def test_vote_twice_is_rejected(client, profiles, bob_headers, make_competition, make_gallery_piece, make_entry):
    entry = make_entry(make_competition(), make_gallery_piece(ALICE_ID))

    first = client.post(f'/api/competition-submissions/{entry.id}/votes', headers=bob_headers)
    second = client.post(f'/api/competition-submissions/{entry.id}/votes', headers=bob_headers)

    assert first.status_code == 200
    assert first.get_json()['data'] == {'submission_id': entry.id, 'vote_count': 1, 'user_voted': True}
    assert second.status_code == 409
    assert second.get_json()['error_code'] == 'ALREADY_VOTED'
    assert second.get_json()['error'] == 'You have already voted for this submission'
    assert Vote.query.filter_by(submission_id=entry.id).count() == 1


def test_vote_count_is_previous_count_plus_one(client, profiles, alice_headers, bob_headers,
                                               make_competition, make_gallery_piece, make_entry):
    entry = make_entry(make_competition(), make_gallery_piece(ALICE_ID))
    client.post(f'/api/competition-submissions/{entry.id}/votes', headers=alice_headers)

    response = client.post(f'/api/competition-submissions/{entry.id}/votes', headers=bob_headers)

    assert response.get_json()['data']['vote_count'] == 2


def test_vote_for_unknown_entry_is_404(client, bob_headers):
    response = client.post('/api/competition-submissions/missing/votes', headers=bob_headers)

    assert response.status_code == 404


def test_submit_twice_is_rejected(client, profiles, alice_headers, make_competition, make_gallery_piece):
    competition = make_competition()
    piece = make_gallery_piece(ALICE_ID)
    url = f'/api/competitions/{competition.id}/submissions'

    first = client.post(url, headers=alice_headers, json={'submission_id': piece.id})
    second = client.post(url, headers=alice_headers, json={'submission_id': piece.id})

    assert first.status_code == 200
    assert second.status_code == 409
    assert second.get_json()['error_code'] == 'ALREADY_SUBMITTED'
    assert second.get_json()['error'] == 'This artwork has already been submitted to this competition'
    assert CompetitionSubmission.query.count() == 1


def test_submit_requires_active_competition(client, profiles, alice_headers, make_competition, make_gallery_piece):
    competition = make_competition(start_offset=timedelta(days=-10), end_offset=timedelta(days=-1))
    piece = make_gallery_piece(ALICE_ID)

    response = client.post(f'/api/competitions/{competition.id}/submissions',
                           headers=alice_headers, json={'submission_id': piece.id})

    assert response.status_code == 400


def test_submit_requires_approved_piece(client, profiles, alice_headers, make_competition, make_gallery_piece):
    competition = make_competition()
    piece = make_gallery_piece(ALICE_ID, is_approved=False)

    response = client.post(f'/api/competitions/{competition.id}/submissions',
                           headers=alice_headers, json={'submission_id': piece.id})

    assert response.status_code == 400


def test_submit_someone_elses_piece_is_404(client, profiles, bob_headers, make_competition, make_gallery_piece):
    competition = make_competition()
    piece = make_gallery_piece(ALICE_ID)

    response = client.post(f'/api/competitions/{competition.id}/submissions',
                           headers=bob_headers, json={'submission_id': piece.id})

    assert response.status_code == 404


def test_board_shows_counts_and_user_voted(client, profiles, alice_headers, bob_headers,
                                           make_competition, make_gallery_piece, make_entry):
    competition = make_competition()
    voted = make_entry(competition, make_gallery_piece(ALICE_ID, title='Voted'))
    make_entry(competition, make_gallery_piece(ALICE_ID, title='Not voted'))
    client.post(f'/api/competition-submissions/{voted.id}/votes', headers=bob_headers)

    mine = client.get(f'/api/competitions/{competition.id}', headers=bob_headers).get_json()['data']
    anonymous = client.get(f'/api/competitions/{competition.id}').get_json()['data']

    flags = {entry['gallery_submission']['title']: (entry['vote_count'], entry['user_voted'])
             for entry in mine['submissions']}
    assert flags == {'Voted': (1, True), 'Not voted': (0, False)}
    assert all(entry['user_voted'] is False for entry in anonymous['submissions'])
    assert mine['competition']['status'] == ACTIVE


def test_unknown_competition_board_is_404(client):
    assert client.get('/api/competitions/missing').status_code == 404


def test_gallery_lists_approved_pieces_only(client, profiles, alice_headers, make_gallery_piece):
    make_gallery_piece(ALICE_ID, title='Public')
    make_gallery_piece(ALICE_ID, is_approved=False, title='Hidden')
    make_gallery_piece(BOB_ID, title='Bob piece')

    everyone = client.get('/api/gallery').get_json()['data']
    mine = client.get('/api/gallery/mine', headers=alice_headers).get_json()['data']

    assert sorted(piece['title'] for piece in everyone) == ['Bob piece', 'Public']
    assert [piece['title'] for piece in mine] == ['Public']
    assert mine[0]['owner_name'] == 'Alice Artist'


def _foreign_key_failure():
    return IntegrityError('INSERT', {}, Exception('FOREIGN KEY constraint failed'))


def test_submit_store_failure_is_500_not_conflict(app, profiles, make_competition, make_gallery_piece):
    competition = make_competition()
    piece = make_gallery_piece(ALICE_ID)
    alice = UserContext(id=ALICE_ID, email='alice@example.com', full_name='Alice')

    with mock.patch.object(db.session, 'commit', side_effect=_foreign_key_failure()):
        body, status = submit_to_competition(alice, competition.id, piece.id)

    assert status == 500
    assert 'error_code' not in body
    assert CompetitionSubmission.query.count() == 0


def test_vote_store_failure_is_500_not_conflict(app, profiles, make_competition, make_gallery_piece, make_entry):
    entry = make_entry(make_competition(), make_gallery_piece(ALICE_ID))
    bob = UserContext(id=BOB_ID, email='bob@example.com', full_name='Bob')

    with mock.patch.object(db.session, 'commit', side_effect=_foreign_key_failure()):
        body, status = cast_vote(bob, entry.id)

    assert status == 500
    assert 'error_code' not in body
    assert Vote.query.count() == 0
