"""
Tests for client-side form validation
"""
from datetime import datetime

from client.validation import validate_registration_form


def form(**overrides):
    data = {
        'fullName': 'Asha Rao',
        'email': 'asha@example.com',
        'phone': '9876543210',
        'service': 'EduTech',
        'course': 'Online Tutoring',
    }
    data.update(overrides)
    return data


def test_valid_form():
    assert validate_registration_form(form()) == {}


def test_required_fields():
    errors = validate_registration_form({})

    assert errors == {
        'fullName': 'Full name is required',
        'email': 'Email is required',
        'phone': 'Phone number is required',
        'service': 'Service is required',
        'course': 'Course is required',
    }


def test_phone_message_matches_server():
    errors = validate_registration_form(form(phone='12345'))
    assert errors['phone'] == '12345 is not a valid phone number! Phone number must be 10 digits'


def test_bad_email():
    assert validate_registration_form(form(email='nope'))['email'] == 'Please enter a valid email'


def test_passing_year_range():
    upper = datetime.now().year + 5

    assert 'passingYear' not in validate_registration_form(form(passingYear=upper))
    assert validate_registration_form(form(passingYear=upper + 1))['passingYear'] == f'Year must be between 1900 and {upper}'
    assert validate_registration_form(form(passingYear='20x1'))['passingYear'] == 'Passing year must be a number'


def test_length_limits():
    errors = validate_registration_form(form(fullName='x' * 101, message='m' * 501))

    assert errors['fullName'] == 'Name cannot exceed 100 characters'
    assert errors['message'] == 'Message cannot exceed 500 characters'


def test_qualification_limit_matches_server():
    assert validate_registration_form(form(qualification='q' * 100)) == {}
    assert validate_registration_form(form(qualification='q' * 101))['qualification'] == 'Qualification cannot exceed 100 characters'
