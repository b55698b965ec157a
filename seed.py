from datetime import datetime, timezone, timedelta
from lifelessons import create_app
from lifelessons import firestore_dao as dao
from lifelessons.firestore_models import Lesson, Report


SAMPLE_LESSONS = [
    ('Patience', 'Wait well', 'Personal Growth', 'Reflective', 'free'),
    ('Say no more often', 'Your time is a budget', 'Career', 'Motivational', 'free'),
    ('Call your parents', 'They will not always be there', 'Relationships', 'Sad', 'free'),
    ('Failing forward', 'Every mistake is tuition', 'Mistakes Learned', 'Realization', 'premium'),
    ('Sleep is a skill', 'Protect the first hour of the night', 'Self-Growth', 'Gratitude', 'premium'),
]


def seed_database(app=None):
    app = app or create_app()
    with app.app_context():
        print("Creating users...")
        dao.upsert_user('admin@example.com', name='Admin')
        dao.update_user_role('admin@example.com', 'admin')
        dao.upsert_user('writer@example.com', name='Writer')
        dao.upsert_user('reader@example.com', name='Reader')

        print("Creating lessons...")
        now = datetime.now(timezone.utc)
        lesson_ids = []
        for i, (title, short, category, tone, access) in enumerate(SAMPLE_LESSONS):
            lesson_ids.append(dao.create_lesson(Lesson(
                title=title,
                shortDescription=short,
                creatorEmail='writer@example.com',
                creatorName='Writer',
                category=category,
                emotionalTone=tone,
                accessLevel=access,
                created_at=now - timedelta(days=i),
            )))
        dao.set_lesson_fields(lesson_ids[0], {'isFeatured': True})

        print("Creating favorites and reports...")
        dao.create_favorite(lesson_ids[0], 'reader@example.com')
        dao.toggle_like(lesson_ids[0], 'reader@example.com')
        dao.create_report(Report(
            lessonId=lesson_ids[1],
            reporterEmail='reader@example.com',
            reason='Misleading',
        ))

        print("=" * 60)
        print("  admin:  admin@example.com")
        print("  writer: writer@example.com")
        print("  reader: reader@example.com")
        print("=" * 60)
        print("Seed complete!")
        return lesson_ids


if __name__ == '__main__':
    seed_database()
