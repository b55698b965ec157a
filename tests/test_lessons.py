from lifelessons import firestore_dao as dao


def test_create_lesson_applies_defaults_and_forces_creator(client, db, make_user, auth):
    make_user('a@example.com', name='Alice')
    resp = client.post('/lessons', headers=auth('a@example.com'), json={
        'title': 'Patience',
        'shortDescription': 'Wait well',
        'creatorEmail': 'mallory@example.com',
        'likesCount': 99,
    })
    assert resp.status_code == 200
    lesson = db.docs('lessons')[resp.get_json()['insertedId']]

    assert lesson['creatorEmail'] == 'a@example.com'
    assert lesson['creatorName'] == 'Alice'
    assert lesson['category'] == 'Self-Growth'
    assert lesson['emotionalTone'] == 'Reflective'
    assert lesson['accessLevel'] == 'free'
    assert lesson['visibility'] == 'public'
    assert lesson['likesCount'] == 0
    assert lesson['savedCount'] == 0
    assert lesson['likes'] == []
    assert lesson['isDeleted'] is False
    assert lesson['isFeatured'] is False


def test_create_lesson_requires_title_and_short_description(client, make_user, auth):
    make_user('a@example.com')
    resp = client.post('/lessons', headers=auth('a@example.com'), json={'title': 'Only a title'})
    assert resp.status_code == 400
    assert resp.get_json() == {'message': 'Title and short description are required'}


def test_create_lesson_requires_token(client):
    resp = client.post('/lessons', json={'title': 't', 'shortDescription': 's'})
    assert resp.status_code == 401
    assert resp.get_json() == {'message': 'unauthorized'}


def test_malformed_and_forged_tokens_are_rejected(client):
    for header in ('Bearer', 'Token', 'Bearer not-a-real-token'):
        resp = client.post('/lessons', headers={'Authorization': header},
                           json={'title': 't', 'shortDescription': 's'})
        assert resp.status_code == 401
        assert resp.get_json() == {'message': 'unauthorized'}


def test_my_lessons_is_self_only(client, make_lesson, auth):
    make_lesson(creator='a@example.com', title='Mine')
    make_lesson(creator='b@example.com', title='Theirs')
    deleted = make_lesson(creator='a@example.com', title='Gone')
    dao.soft_delete_lesson(deleted)

    resp = client.get('/lessons/my?email=a@example.com', headers=auth('a@example.com'))
    assert resp.status_code == 200
    assert [l['title'] for l in resp.get_json()] == ['Mine']

    assert client.get('/lessons/my?email=b@example.com', headers=auth('a@example.com')).status_code == 403
    assert client.get('/lessons/my', headers=auth('a@example.com')).status_code == 400


def test_update_only_touches_allowed_fields(client, db, make_lesson, make_user, auth):
    make_user('a@example.com')
    lesson_id = make_lesson(creator='a@example.com')

    resp = client.patch(f'/lessons/{lesson_id}', headers=auth('a@example.com'), json={
        'title': 'Renamed',
        'visibility': 'private',
        'creatorEmail': 'mallory@example.com',
        'isFeatured': True,
    })
    assert resp.status_code == 200
    lesson = db.docs('lessons')[lesson_id]
    assert lesson['title'] == 'Renamed'
    assert lesson['visibility'] == 'private'
    assert lesson['shortDescription'] == 'A short lesson'
    assert lesson['creatorEmail'] == 'a@example.com'
    assert lesson['isFeatured'] is False
    assert lesson['updatedAt'] > lesson['createdAt']


def test_update_rejects_unknown_visibility(client, make_lesson, make_user, auth):
    make_user('a@example.com')
    lesson_id = make_lesson(creator='a@example.com')
    resp = client.patch(f'/lessons/{lesson_id}', headers=auth('a@example.com'), json={'visibility': 'secret'})
    assert resp.status_code == 400


def test_update_rejects_blank_values(client, db, make_lesson, make_user, auth):
    make_user('a@example.com')
    lesson_id = make_lesson(creator='a@example.com', title='Keep me')
    headers = auth('a@example.com')

    resp = client.patch(f'/lessons/{lesson_id}', headers=headers,
                        json={'visibility': '', 'accessLevel': '', 'title': ''})
    assert resp.status_code == 400
    assert resp.get_json() == {'message': 'Title cannot be empty'}

    for body in ({'visibility': ''}, {'accessLevel': '  '}, {'category': ''},
                 {'shortDescription': None}, {'visibility': None}):
        assert client.patch(f'/lessons/{lesson_id}', headers=headers, json=body).status_code == 400, body

    lesson = db.docs('lessons')[lesson_id]
    assert lesson['title'] == 'Keep me'
    assert lesson['visibility'] == 'public'
    assert lesson['accessLevel'] == 'free'
    assert lesson['category'] == 'Self-Growth'
    assert lesson['shortDescription'] == 'A short lesson'


def test_update_allows_clearing_details(client, db, make_lesson, make_user, auth):
    make_user('a@example.com')
    lesson_id = make_lesson(creator='a@example.com', details='Long story')
    resp = client.patch(f'/lessons/{lesson_id}', headers=auth('a@example.com'),
                        json={'details': '', 'accessLevel': 'premium'})
    assert resp.status_code == 200
    lesson = db.docs('lessons')[lesson_id]
    assert lesson['details'] == ''
    assert lesson['accessLevel'] == 'premium'


def test_non_owner_cannot_update_or_delete(client, make_lesson, make_user, auth):
    make_user('a@example.com')
    make_user('b@example.com')
    lesson_id = make_lesson(creator='a@example.com')

    assert client.patch(f'/lessons/{lesson_id}', headers=auth('b@example.com'),
                        json={'title': 'x'}).status_code == 403
    assert client.delete(f'/lessons/my/{lesson_id}', headers=auth('b@example.com')).status_code == 403


def test_admin_can_update_any_lesson(client, db, make_lesson, make_user, auth):
    make_user('root@example.com', role='admin')
    lesson_id = make_lesson(creator='a@example.com')
    resp = client.patch(f'/lessons/{lesson_id}', headers=auth('root@example.com'), json={'category': 'Career'})
    assert resp.status_code == 200
    assert db.docs('lessons')[lesson_id]['category'] == 'Career'


def test_update_missing_lesson_is_404(client, make_user, auth):
    make_user('a@example.com')
    assert client.patch('/lessons/nope', headers=auth('a@example.com'), json={'title': 'x'}).status_code == 404


def test_owner_soft_delete_then_404(client, db, make_lesson, make_user, auth):
    make_user('a@example.com')
    lesson_id = make_lesson(creator='a@example.com')

    assert client.delete(f'/lessons/my/{lesson_id}', headers=auth('a@example.com')).status_code == 200
    assert db.docs('lessons')[lesson_id]['isDeleted'] is True
    assert client.delete(f'/lessons/my/{lesson_id}', headers=auth('a@example.com')).status_code == 404
    assert client.get(f'/lessons/{lesson_id}', headers=auth('a@example.com')).status_code == 404


def test_public_listing_excludes_private_and_deleted(client, make_lesson):
    visible = make_lesson(title='Visible', isFeatured=True, savedCount=1)
    make_lesson(title='Private', visibility='private', isFeatured=True, savedCount=5)
    make_lesson(title='Deleted', isDeleted=True, isFeatured=True, savedCount=9)

    for path in ('/lessons/public', '/lessons/featured', '/lessons/most-saved'):
        lessons = client.get(path).get_json()['lessons']
        assert [l['_id'] for l in lessons] == [visible], path


def test_public_listing_pagination(client, make_lesson):
    ids = [make_lesson() for _ in range(12)]

    body = client.get('/lessons/public?page=2&limit=5').get_json()
    assert len(body['lessons']) == 5
    assert body['pagination'] == {'total': 12, 'page': 2, 'limit': 5, 'totalPages': 3}
    # newest first: page 2 holds the 6th..10th newest
    assert [l['_id'] for l in body['lessons']] == list(reversed(ids))[5:10]


def test_public_listing_clamps_paging(client, make_lesson):
    make_lesson()
    body = client.get('/lessons/public?page=-3&limit=500').get_json()
    assert body['pagination']['page'] == 1
    assert body['pagination']['limit'] == 50

    body = client.get('/lessons/public?page=abc&limit=xyz').get_json()
    assert body['pagination']['page'] == 1
    assert body['pagination']['limit'] == 9


def test_public_listing_filters_and_search(client, make_lesson):
    make_lesson(title='Learning PATIENCE', category='Self-Growth', emotionalTone='Reflective')
    make_lesson(title='Other', shortDescription='patience pays', category='Career', emotionalTone='Reflective')
    make_lesson(title='Unrelated', category='Career', emotionalTone='Sad')

    titles = lambda q: sorted(l['title'] for l in client.get(f'/lessons/public?{q}').get_json()['lessons'])

    assert titles('search=patience') == ['Learning PATIENCE', 'Other']
    assert titles('category=Career') == ['Other', 'Unrelated']
    assert titles('tone=Sad') == ['Unrelated']
    assert titles('search=patience&category=Career') == ['Other']


def test_public_listing_most_saved_sort(client, make_lesson):
    older = make_lesson(title='Older', savedCount=3)
    newer = make_lesson(title='Newer', savedCount=3)
    top = make_lesson(title='Top', savedCount=10)
    low = make_lesson(title='Low', savedCount=0)

    lessons = client.get('/lessons/public?sort=mostSaved').get_json()['lessons']
    assert [l['_id'] for l in lessons] == [top, newer, older, low]

    lessons = client.get('/lessons/public?sort=mostSaved&search=er').get_json()['lessons']
    assert [l['_id'] for l in lessons] == [newer, older]


def test_featured_and_most_saved_are_capped_at_six(client, make_lesson):
    for i in range(8):
        make_lesson(isFeatured=True, savedCount=i)
    assert len(client.get('/lessons/featured').get_json()['lessons']) == 6
    most_saved = client.get('/lessons/most-saved').get_json()['lessons']
    assert [l['savedCount'] for l in most_saved] == [7, 6, 5, 4, 3, 2]


def test_premium_lesson_gate(client, make_lesson, make_user, auth):
    make_user('writer@example.com')
    make_user('vip@example.com', premium=True)
    make_user('free@example.com')
    lesson_id = make_lesson(creator='writer@example.com', accessLevel='premium')

    assert client.get(f'/lessons/{lesson_id}', headers=auth('writer@example.com')).status_code == 200
    assert client.get(f'/lessons/{lesson_id}', headers=auth('vip@example.com')).status_code == 200
    resp = client.get(f'/lessons/{lesson_id}', headers=auth('free@example.com'))
    assert resp.status_code == 403
    assert resp.get_json() == {'message': 'Premium access required'}


def test_free_lesson_detail_serialises_timestamps(client, make_lesson, make_user, auth):
    make_user('free@example.com')
    lesson_id = make_lesson()
    body = client.get(f'/lessons/{lesson_id}', headers=auth('free@example.com')).get_json()
    assert body['_id'] == lesson_id
    assert body['createdAt'].startswith('2026-01-01T00:')


def test_like_toggle_scenario(client, db, make_user, auth):
    make_user('a@example.com')
    make_user('b@example.com')
    lesson_id = client.post('/lessons', headers=auth('a@example.com'), json={
        'title': 'Patience', 'shortDescription': 'Wait well',
    }).get_json()['insertedId']

    first = client.post(f'/lessons/{lesson_id}/like', headers=auth('b@example.com')).get_json()
    assert first == {'success': True, 'liked': True, 'likesCount': 1}
    assert db.docs('lessons')[lesson_id]['likes'] == ['b@example.com']

    second = client.patch(f'/lessons/{lesson_id}/like', headers=auth('b@example.com')).get_json()
    assert second == {'success': True, 'liked': False, 'likesCount': 0}
    assert db.docs('lessons')[lesson_id]['likes'] == []


def test_like_missing_lesson(client, make_user, auth):
    make_user('b@example.com')
    assert client.patch('/lessons/missing/like', headers=auth('b@example.com')).status_code == 404


def test_comments(client, make_lesson, make_user, auth):
    make_user('c@example.com', name='Carol')
    lesson_id = make_lesson()

    assert client.post(f'/lessons/{lesson_id}/comments', headers=auth('c@example.com'),
                       json={'comment': '   '}).status_code == 400

    created = client.post(f'/lessons/{lesson_id}/comments', headers=auth('c@example.com'),
                          json={'comment': '  Nice one  '}).get_json()
    assert created['text'] == 'Nice one'
    assert created['userName'] == 'Carol'
    assert created['userEmail'] == 'c@example.com'

    comments = client.get(f'/lessons/{lesson_id}/comments').get_json()['comments']
    assert [c['text'] for c in comments] == ['Nice one']


def test_admin_raw_listing_and_soft_delete(client, db, make_lesson, make_user, auth):
    make_user('root@example.com', role='admin')
    make_user('a@example.com')
    keep = make_lesson()
    drop = make_lesson()

    assert client.get('/lessons', headers=auth('a@example.com')).status_code == 403
    assert client.delete(f'/lessons/{drop}', headers=auth('root@example.com')).status_code == 200
    assert client.delete(f'/lessons/{drop}', headers=auth('root@example.com')).status_code == 404

    lessons = client.get('/lessons', headers=auth('root@example.com')).get_json()
    assert [l['_id'] for l in lessons] == [keep]
