"""
Firestore Data Access Object (DAO) layer.

Every read and write of the six collections goes through this module. Route
files and guards call these functions instead of touching the client directly.
Functions return plain dicts (document fields plus ``_id``/``id``) or ``None``
when a document is absent; they never raise API errors themselves.
"""

import math
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone, timedelta

from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1 import FieldFilter, Increment, ArrayUnion, ArrayRemove, transactional

from lifelessons.firebase_init import get_db
from lifelessons.firestore_models import User, Lesson, Favorite


USERS = 'users'
LESSONS = 'lessons'
REPORTS = 'reports'
FAVORITES = 'favorites'
COMMENTS = 'comments'
CONTACT_MESSAGES = 'contactMessages'

HIGHLIGHT_LIMIT = 6
GROWTH_DAYS = 30


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _doc_to_dict(doc_snapshot):
    """Convert a Firestore DocumentSnapshot to a dict with '_id' and 'id'."""
    if not doc_snapshot.exists:
        return None
    d = doc_snapshot.to_dict()
    d['_id'] = doc_snapshot.id
    d['id'] = doc_snapshot.id
    return d


def _query_to_list(query_ref):
    """Run a query and return a list of dicts."""
    return [_doc_to_dict(doc) for doc in query_ref.stream()]


def _count(query_ref):
    """Server-side count aggregation for a query or collection."""
    result = query_ref.count().get()
    return int(result[0][0].value)


def _now():
    return datetime.now(timezone.utc)


def _local_midnight():
    return datetime.now().astimezone().replace(hour=0, minute=0, second=0, microsecond=0)


def is_valid_id(doc_id):
    """True when ``doc_id`` can address a Firestore document."""
    if not isinstance(doc_id, str) or not doc_id:
        return False
    if len(doc_id.encode('utf-8')) > 1500 or '/' in doc_id:
        return False
    if doc_id in ('.', '..'):
        return False
    return not (doc_id.startswith('__') and doc_id.endswith('__'))


def _active_lessons():
    return get_db().collection(LESSONS).where(filter=FieldFilter('isDeleted', '==', False))


def _public_lessons():
    return _active_lessons().where(filter=FieldFilter('visibility', '==', 'public'))


# ========================================================================
# Users  (collection: users, document id = email)
# ========================================================================

def get_user(user_id):
    """Get a user document by ID. Returns dict or None."""
    if not is_valid_id(user_id):
        return None
    doc = get_db().collection(USERS).document(user_id).get()
    return _doc_to_dict(doc)


def get_user_by_email(email):
    """Get a user by email address. Returns dict or None."""
    return get_user(email)


def upsert_user(email, name='', photo_url=''):
    """Create or refresh a user profile keyed by email.

    Profile fields and updatedAt are written every time; createdAt, role and
    isPremium only when the document is created. Returns True on insert.
    """
    user = User(email=email, name=name or '', photoURL=photo_url or '')
    ref = get_db().collection(USERS).document(email)
    try:
        ref.create({**user.profile_fields(), **user.insert_only_fields()})
        return True
    except AlreadyExists:
        ref.update(user.profile_fields())
        return False


def list_users():
    """All users, newest first."""
    return _query_to_list(
        get_db().collection(USERS).order_by('createdAt', direction='DESCENDING')
    )


def list_users_with_lesson_counts():
    """All users, newest first, each with the number of its non-deleted lessons."""
    counts = Counter(
        doc.to_dict().get('creatorEmail') for doc in _active_lessons().stream()
    )
    users = list_users()
    for user in users:
        user['lessonsCount'] = counts.get(user.get('email'), 0)
    return users


def update_user_role(user_id, role):
    """Set a user's role. Returns False when the user does not exist."""
    ref = get_db().collection(USERS).document(user_id)
    if not ref.get().exists:
        return False
    ref.update({'role': role, 'updatedAt': _now()})
    return True


def delete_user(email):
    """Delete a user by email. Returns False when the user does not exist."""
    ref = get_db().collection(USERS).document(email)
    if not ref.get().exists:
        return False
    ref.delete()
    return True


def is_premium(email):
    if not email:
        return False
    user = get_user_by_email(email)
    return bool(user and user.get('isPremium'))


def mark_premium(email, transaction_id):
    """Flag a user as premium, creating the user document if needed."""
    now = _now()
    fields = {
        'email': email,
        'isPremium': True,
        'premiumSince': now,
        'lastTransactionId': transaction_id,
    }
    ref = get_db().collection(USERS).document(email)
    try:
        ref.create({**fields, 'createdAt': now, 'role': 'user'})
    except AlreadyExists:
        ref.update(fields)


# ========================================================================
# Lessons  (collection: lessons)
# ========================================================================

def get_lesson(lesson_id, include_deleted=False):
    """Get a lesson by ID. Soft-deleted lessons are None unless include_deleted."""
    if not is_valid_id(lesson_id):
        return None
    lesson = _doc_to_dict(get_db().collection(LESSONS).document(lesson_id).get())
    if lesson is None:
        return None
    if lesson.get('isDeleted') is True and not include_deleted:
        return None
    return lesson


def create_lesson(lesson):
    """Insert a Lesson model. Returns the generated doc ID."""
    _, doc_ref = get_db().collection(LESSONS).add(lesson.to_dict())
    return doc_ref.id


def update_lesson(lesson_id, fields):
    """Apply allow-listed fields to a lesson and bump updatedAt."""
    data = {k: v for k, v in fields.items() if k in Lesson.MUTABLE_FIELDS}
    data['updatedAt'] = _now()
    get_db().collection(LESSONS).document(lesson_id).update(data)
    return data


def soft_delete_lesson(lesson_id):
    """Flag a lesson as deleted. Returns False if absent or already deleted."""
    if get_lesson(lesson_id) is None:
        return False
    get_db().collection(LESSONS).document(lesson_id).update({
        'isDeleted': True,
        'updatedAt': _now(),
    })
    return True


def hard_delete_lesson(lesson_id):
    """Physically remove a lesson, deleted or not. Returns False if absent."""
    ref = get_db().collection(LESSONS).document(lesson_id)
    if not ref.get().exists:
        return False
    ref.delete()
    return True


def set_lesson_fields(lesson_id, data):
    """Admin update of moderation fields. Returns False if the lesson is absent."""
    ref = get_db().collection(LESSONS).document(lesson_id)
    if not ref.get().exists:
        return False
    ref.update({**data, 'updatedAt': _now()})
    return True


def toggle_lesson_visibility(lesson_id):
    """Flip public/private. Returns the new visibility or None if absent."""
    lesson = get_lesson(lesson_id, include_deleted=True)
    if lesson is None:
        return None
    visibility = 'private' if lesson.get('visibility') == 'public' else 'public'
    get_db().collection(LESSONS).document(lesson_id).update({
        'visibility': visibility,
        'updatedAt': _now(),
    })
    return visibility


def get_lessons_by_creator(email):
    """Non-deleted lessons of one creator, newest first."""
    return _query_to_list(
        _active_lessons()
        .where(filter=FieldFilter('creatorEmail', '==', email))
        .order_by('createdAt', direction='DESCENDING')
    )


def get_active_lessons():
    """Every non-deleted lesson, newest first."""
    return _query_to_list(_active_lessons().order_by('createdAt', direction='DESCENDING'))


def _matches_search(lesson, needle):
    needle = needle.lower()
    return (needle in (lesson.get('title') or '').lower()
            or needle in (lesson.get('shortDescription') or '').lower())


def _sort_key(sort):
    if sort == 'mostSaved':
        return lambda l: (l.get('savedCount') or 0, l.get('createdAt') or datetime.min.replace(tzinfo=timezone.utc))
    return lambda l: l.get('createdAt') or datetime.min.replace(tzinfo=timezone.utc)


def list_public_lessons(search='', category='', tone='', sort='newest', page=1, limit=9):
    """One page of public lessons.

    Returns ``(lessons, total)``. Without a search term, ordering and paging
    run in Firestore; a search term is matched case-insensitively against
    title and shortDescription, which Firestore cannot express, so the
    filtered set is ordered and sliced here.
    """
    query = _public_lessons()
    if category:
        query = query.where(filter=FieldFilter('category', '==', category))
    if tone:
        query = query.where(filter=FieldFilter('emotionalTone', '==', tone))

    skip = (page - 1) * limit
    search = (search or '').strip()

    if search:
        matched = [l for l in _query_to_list(query) if _matches_search(l, search)]
        matched.sort(key=_sort_key(sort), reverse=True)
        return matched[skip:skip + limit], len(matched)

    ordered = query
    if sort == 'mostSaved':
        ordered = ordered.order_by('savedCount', direction='DESCENDING')
    ordered = ordered.order_by('createdAt', direction='DESCENDING')
    lessons = _query_to_list(ordered.offset(skip).limit(limit))
    return lessons, _count(query)


def total_pages(total, limit):
    return math.ceil(total / limit) if limit else 0


def get_featured_lessons(limit=HIGHLIGHT_LIMIT):
    return _query_to_list(
        _public_lessons()
        .where(filter=FieldFilter('isFeatured', '==', True))
        .order_by('createdAt', direction='DESCENDING')
        .limit(limit)
    )


def get_most_saved_lessons(limit=HIGHLIGHT_LIMIT):
    return _query_to_list(
        _public_lessons()
        .order_by('savedCount', direction='DESCENDING')
        .limit(limit)
    )


def toggle_like(lesson_id, email):
    """Add or remove ``email`` from a lesson's likes.

    Returns ``(liked, likes_count)`` where the count is read back after the
    write, or None if the lesson is absent or deleted.
    """
    lesson = get_lesson(lesson_id)
    if lesson is None:
        return None

    ref = get_db().collection(LESSONS).document(lesson_id)
    has_liked = email in (lesson.get('likes') or [])
    if has_liked:
        ref.update({'likes': ArrayRemove([email]), 'likesCount': Increment(-1)})
    else:
        ref.update({'likes': ArrayUnion([email]), 'likesCount': Increment(1)})

    updated = _doc_to_dict(ref.get()) or {}
    return not has_liked, updated.get('likesCount') or 0


def list_admin_lessons(visibility='all', category='', flagged='all'):
    """Non-deleted lessons with their report count, plus overall totals.

    ``flagged`` ('true'/'false') filters on the joined report count after
    the listing is built; the totals ignore all filters.
    """
    query = _active_lessons()
    if visibility in ('public', 'private'):
        query = query.where(filter=FieldFilter('visibility', '==', visibility))
    if category:
        query = query.where(filter=FieldFilter('category', '==', category))

    with ThreadPoolExecutor(max_workers=5) as pool:
        lessons_f = pool.submit(_query_to_list, query.order_by('createdAt', direction='DESCENDING'))
        reports_f = pool.submit(_report_counts_by_lesson)
        public_f = pool.submit(_count, _public_lessons())
        private_f = pool.submit(_count, _active_lessons().where(filter=FieldFilter('visibility', '==', 'private')))
        total_f = pool.submit(_count, _active_lessons())
        flags = reports_f.result()
        lessons = lessons_f.result()

    for lesson in lessons:
        lesson['flagsCount'] = flags.get(lesson['_id'], 0)

    if flagged == 'true':
        lessons = [l for l in lessons if l['flagsCount'] > 0]
    elif flagged == 'false':
        lessons = [l for l in lessons if l['flagsCount'] == 0]

    return {
        'stats': {
            'total': total_f.result(),
            'public': public_f.result(),
            'private': private_f.result(),
            'flagged': len(flags),
        },
        'lessons': lessons,
    }


# ========================================================================
# Comments  (collection: comments)
# ========================================================================

def get_comments(lesson_id):
    """Comments of a lesson, newest first."""
    return _query_to_list(
        get_db().collection(COMMENTS)
        .where(filter=FieldFilter('lessonId', '==', lesson_id))
        .order_by('createdAt', direction='DESCENDING')
    )


def create_comment(comment):
    """Insert a Comment model. Returns the stored comment."""
    _, doc_ref = get_db().collection(COMMENTS).add(comment.to_dict())
    return _doc_to_dict(doc_ref.get())


# ========================================================================
# Favorites  (collection: favorites)
# ========================================================================

def get_favorite(favorite_id):
    if not is_valid_id(favorite_id):
        return None
    return _doc_to_dict(get_db().collection(FAVORITES).document(favorite_id).get())


def find_favorite(lesson_id, email):
    docs = (
        get_db().collection(FAVORITES)
        .where(filter=FieldFilter('lessonId', '==', lesson_id))
        .where(filter=FieldFilter('userEmail', '==', email))
        .limit(1)
        .stream()
    )
    for doc in docs:
        return _doc_to_dict(doc)
    return None


def create_favorite(lesson_id, email):
    """Insert a favorite and bump the lesson's savedCount. Returns doc ID."""
    _, doc_ref = get_db().collection(FAVORITES).add(Favorite(lesson_id, email).to_dict())
    get_db().collection(LESSONS).document(lesson_id).update({'savedCount': Increment(1)})
    return doc_ref.id


def _release_saved_slot(transaction, lesson_ref):
    """Decrement savedCount, never below zero. Runs inside a transaction."""
    snapshot = lesson_ref.get(transaction=transaction)
    if not snapshot.exists:
        return
    saved = snapshot.to_dict().get('savedCount') or 0
    if saved > 0:
        transaction.update(lesson_ref, {'savedCount': saved - 1})


def delete_favorite(favorite):
    """Delete a favorite and decrement savedCount, never below zero."""
    get_db().collection(FAVORITES).document(favorite['_id']).delete()
    lesson_ref = get_db().collection(LESSONS).document(favorite['lessonId'])
    # The wrapper keeps per-run retry state, so build one per call
    transactional(_release_saved_slot)(get_db().transaction(), lesson_ref)


def get_favorites_with_lessons(email):
    """The user's favorites joined to their lessons, newest first.

    Favorites whose lesson is missing or soft-deleted are left out.
    """
    favorites = _query_to_list(
        get_db().collection(FAVORITES)
        .where(filter=FieldFilter('userEmail', '==', email))
        .order_by('createdAt', direction='DESCENDING')
    )
    out = []
    for fav in favorites:
        lesson = get_lesson(fav.get('lessonId'))
        if lesson is None:
            continue
        out.append({'_id': fav['_id'], 'lesson': lesson, 'createdAt': fav.get('createdAt')})
    return out


# ========================================================================
# Reports  (collection: reports)
# ========================================================================

def create_report(report):
    """Insert a Report model. Returns the generated doc ID."""
    _, doc_ref = get_db().collection(REPORTS).add(report.to_dict())
    return doc_ref.id


def list_reports():
    return _query_to_list(
        get_db().collection(REPORTS).order_by('createdAt', direction='DESCENDING')
    )


def resolve_report(report_id):
    """Mark a report resolved. Returns False if absent."""
    ref = get_db().collection(REPORTS).document(report_id)
    if not ref.get().exists:
        return False
    ref.update({'status': 'resolved', 'resolvedAt': _now()})
    return True


def delete_report(report_id):
    """Delete one report. Returns False if absent."""
    ref = get_db().collection(REPORTS).document(report_id)
    if not ref.get().exists:
        return False
    ref.delete()
    return True


def delete_reports_for_lesson(lesson_id):
    """Delete every report of a lesson. Returns how many were removed."""
    docs = (
        get_db().collection(REPORTS)
        .where(filter=FieldFilter('lessonId', '==', lesson_id))
        .stream()
    )
    batch = get_db().batch()
    count = 0
    for doc in docs:
        batch.delete(doc.reference)
        count += 1
        # Firestore batches are limited to 500 writes
        if count % 500 == 0:
            batch.commit()
            batch = get_db().batch()
    if count % 500 != 0:
        batch.commit()
    return count


def _report_counts_by_lesson():
    return Counter(doc.to_dict().get('lessonId') for doc in get_db().collection(REPORTS).stream())


def get_reported_lessons():
    """Reports grouped per lesson, most reported first.

    Each group carries the lesson's title, visibility, category and deleted
    state (None when the lesson is gone) and each report is annotated with
    the reporter's display name and photo.
    """
    groups = {}
    for report in list_reports():
        lesson_id = report.get('lessonId')
        group = groups.setdefault(lesson_id, {'lessonId': lesson_id, 'reportCount': 0, 'reports': []})
        group['reportCount'] += 1
        group['reports'].append({
            '_id': report['_id'],
            'reason': report.get('reason'),
            'message': report.get('message'),
            'reporterEmail': report.get('reporterEmail'),
            'status': report.get('status'),
            'createdAt': report.get('createdAt'),
        })

    reporter_emails = {
        r['reporterEmail'] for g in groups.values() for r in g['reports'] if r['reporterEmail']
    }
    reporters = {}
    for email in reporter_emails:
        user = get_user_by_email(email)
        if user:
            reporters[email] = user

    out = []
    for lesson_id, group in groups.items():
        lesson = get_lesson(lesson_id, include_deleted=True) or {}
        group['_id'] = lesson_id
        group['lessonTitle'] = lesson.get('title')
        group['lessonDeleted'] = lesson.get('isDeleted')
        group['lessonVisibility'] = lesson.get('visibility')
        group['category'] = lesson.get('category')
        for r in group['reports']:
            reporter = reporters.get(r['reporterEmail'], {})
            r['reporterName'] = reporter.get('name', '')
            r['reporterPhotoURL'] = reporter.get('photoURL', '')
        out.append(group)

    out.sort(key=lambda g: g['reportCount'], reverse=True)
    return out


# ========================================================================
# Contact messages  (collection: contactMessages)
# ========================================================================

def create_contact_message(message):
    """Insert a ContactMessage model. Returns the generated doc ID."""
    _, doc_ref = get_db().collection(CONTACT_MESSAGES).add(message.to_dict())
    return doc_ref.id


# ========================================================================
# Statistics
# ========================================================================

def fill_daily_series(timestamps, first_day, days=GROWTH_DAYS):
    """Bucket timestamps by local calendar day into a zero-filled series.

    Returns ``days`` entries ``{'date': 'YYYY-MM-DD', 'count': n}`` starting
    at ``first_day`` (a date).
    """
    counts = Counter(ts.astimezone().date() for ts in timestamps if ts is not None)
    series = []
    for i in range(days):
        day = first_day + timedelta(days=i)
        series.append({'date': day.isoformat(), 'count': counts.get(day, 0)})
    return series


def _created_since(query, since):
    return [
        doc.to_dict().get('createdAt')
        for doc in query.where(filter=FieldFilter('createdAt', '>=', since)).stream()
    ]


def get_admin_stats():
    """Dashboard totals plus 30-day lesson and user growth series."""
    today = _local_midnight()
    window_start = today - timedelta(days=GROWTH_DAYS - 1)
    users = get_db().collection(USERS)

    with ThreadPoolExecutor(max_workers=7) as pool:
        total_users = pool.submit(_count, users)
        total_lessons = pool.submit(_count, _active_lessons())
        public_lessons = pool.submit(_count, _public_lessons())
        total_reports = pool.submit(_count, get_db().collection(REPORTS))
        todays = pool.submit(_count, _active_lessons().where(filter=FieldFilter('createdAt', '>=', today)))
        lesson_times = pool.submit(_created_since, _active_lessons(), window_start)
        user_times = pool.submit(_created_since, users, window_start)

        return {
            'totalUsers': total_users.result(),
            'totalLessons': total_lessons.result(),
            'publicLessons': public_lessons.result(),
            'totalReports': total_reports.result(),
            'todaysNewLessons': todays.result(),
            'lessonGrowth': fill_daily_series(lesson_times.result(), window_start.date()),
            'userGrowth': fill_daily_series(user_times.result(), window_start.date()),
        }


def get_top_contributors(limit=HIGHLIGHT_LIMIT):
    """Creators with the most non-deleted lessons."""
    contributors = {}
    for doc in _active_lessons().stream():
        lesson = doc.to_dict()
        email = lesson.get('creatorEmail')
        entry = contributors.setdefault(email, {
            '_id': email,
            'totalLessons': 0,
            'name': lesson.get('creatorName'),
            'avatar': lesson.get('creatorPhotoURL'),
        })
        entry['totalLessons'] += 1
    ranked = sorted(contributors.values(), key=lambda c: c['totalLessons'], reverse=True)
    return ranked[:limit]


def count_public_lessons_by_author(email):
    return _count(_public_lessons().where(filter=FieldFilter('creatorEmail', '==', email)))
