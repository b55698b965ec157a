"""
Request body schemas.

Flask-WTF reads a JSON request body as form data, so each endpoint that
takes a body declares its fields here. Views only ever read the declared
fields, which keeps identity fields (creatorEmail, reporterEmail, ...) out of
client control.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, SelectField, BooleanField
from wtforms.validators import DataRequired, Email, Optional, AnyOf, StopValidation

from lifelessons.errors import InvalidInput
from lifelessons.firestore_models import ROLES, ACCESS_LEVELS, VISIBILITIES

# JSON false arrives as the Python value False, not the string 'false'
JSON_FALSE_VALUES = (False, 'false', '', None, 0)

REQUIRED_LESSON_FIELDS = 'Title and short description are required'
ALL_FIELDS_REQUIRED = 'All fields are required'


class ApiForm(FlaskForm):
    class Meta:
        csrf = False

    def provided(self):
        """Names of the fields present in the request body."""
        return [name for name, field in self._fields.items() if getattr(field, 'raw_data', None)]

    def require_valid(self, message=None):
        """Raise InvalidInput with ``message`` or the first field error."""
        if self.validate():
            return self
        if message:
            raise InvalidInput(message)
        for errors in self.errors.values():
            if errors:
                raise InvalidInput(errors[0])
        raise InvalidInput('Invalid input')


class UserProfileForm(ApiForm):
    email = StringField('Email', validators=[DataRequired(message='Email is required')])
    name = StringField('Name', validators=[Optional()])
    displayName = StringField('Display name', validators=[Optional()])
    photoURL = StringField('Photo URL', validators=[Optional()])


class TokenRequestForm(ApiForm):
    email = StringField('Email', validators=[DataRequired(message='Email is required')])


class LessonForm(ApiForm):
    title = StringField('Title', validators=[DataRequired(message=REQUIRED_LESSON_FIELDS)])
    shortDescription = TextAreaField('Short description', validators=[DataRequired(message=REQUIRED_LESSON_FIELDS)])
    details = TextAreaField('Details', validators=[Optional()])
    category = StringField('Category', validators=[Optional()])
    emotionalTone = StringField('Emotional tone', validators=[Optional()])
    accessLevel = StringField('Access level', validators=[Optional(), AnyOf(ACCESS_LEVELS, message='Invalid access level')])
    visibility = StringField('Visibility', validators=[Optional(), AnyOf(VISIBILITIES, message='Invalid visibility')])
    creatorName = StringField('Creator name', validators=[Optional()])
    creatorPhotoURL = StringField('Creator photo', validators=[Optional()])


class NotBlankIfSent:
    """Skip fields missing from the body; reject ones sent blank or null."""

    def __init__(self, message):
        self.message = message

    def __call__(self, form, field):
        if not field.raw_data:
            raise StopValidation()
        value = field.raw_data[0]
        if value is None or (isinstance(value, str) and not value.strip()):
            raise StopValidation(self.message)


class LessonUpdateForm(ApiForm):
    title = StringField('Title', validators=[NotBlankIfSent('Title cannot be empty')])
    shortDescription = TextAreaField('Short description', validators=[NotBlankIfSent('Short description cannot be empty')])
    details = TextAreaField('Details', validators=[Optional()])
    category = StringField('Category', validators=[NotBlankIfSent('Category cannot be empty')])
    emotionalTone = StringField('Emotional tone', validators=[NotBlankIfSent('Emotional tone cannot be empty')])
    accessLevel = StringField('Access level', validators=[NotBlankIfSent('Invalid access level'), AnyOf(ACCESS_LEVELS, message='Invalid access level')])
    visibility = StringField('Visibility', validators=[NotBlankIfSent('Invalid visibility'), AnyOf(VISIBILITIES, message='Invalid visibility')])

    def changes(self):
        return {name: self[name].data for name in self.provided()}


class CommentForm(ApiForm):
    comment = TextAreaField('Comment', validators=[DataRequired(message='Comment text is required')])


class FeaturedForm(ApiForm):
    featured = BooleanField('Featured', false_values=JSON_FALSE_VALUES)


class ReviewedForm(ApiForm):
    reviewed = BooleanField('Reviewed', false_values=JSON_FALSE_VALUES)


class RoleForm(ApiForm):
    role = SelectField('Role', choices=[(r, r) for r in ROLES], validate_choice=True)


class FavoriteForm(ApiForm):
    lessonId = StringField('Lesson', validators=[DataRequired(message='Valid lessonId is required')])


class ReportForm(ApiForm):
    lessonId = StringField('Lesson', validators=[DataRequired(message='Valid lessonId is required')])
    reason = StringField('Reason', validators=[Optional()])
    message = TextAreaField('Message', validators=[Optional()])


class ContactMessageForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(message=ALL_FIELDS_REQUIRED)])
    email = StringField('Email', validators=[DataRequired(message=ALL_FIELDS_REQUIRED), Email(message='Invalid email address')])
    subject = StringField('Subject', validators=[DataRequired(message=ALL_FIELDS_REQUIRED)])
    message = TextAreaField('Message', validators=[DataRequired(message=ALL_FIELDS_REQUIRED)])


class CheckoutForm(ApiForm):
    email = StringField('Email', validators=[DataRequired(message='Email is required')])
    plan = StringField('Plan', validators=[Optional()])
