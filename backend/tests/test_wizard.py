import httpx
import pytest
from questionnaire.wizard import SUBMIT_FAILED_MESSAGE, WizardForm, default_values


def _fill_standard(wizard, payload):
    wizard.update(**payload)


def _walk_to_last_step(wizard):
    while not wizard.is_last_step:
        assert wizard.next(), wizard.errors


def test_defaults_per_variant():
    standard = default_values('standard')
    assert standard['challenges'] == []
    assert standard['openToContact'] is False
    assert standard['gender'] is None
    assert 'studyReasons' not in standard
    extended = default_values('extended')
    assert extended['studyReasons'] == []
    assert extended['ieltsScore'] == ''


def test_unknown_variant_rejected(client):
    with pytest.raises(ValueError):
        WizardForm(client, variant='compact')


def test_next_blocks_on_current_step_errors_only(client):
    wizard = WizardForm(client)
    assert not wizard.next()
    assert wizard.current_step == 1
    assert 'fullName' in wizard.errors
    # later steps are not validated yet
    assert 'emergencyName' not in wizard.errors
    assert 'challenges' not in wizard.errors


def test_next_advances_and_caps(client, payload):
    wizard = WizardForm(client)
    _fill_standard(wizard, payload)
    assert wizard.next()
    assert wizard.current_step == 2
    assert wizard.scroll_to_top
    _walk_to_last_step(wizard)
    assert wizard.current_step == 4
    assert wizard.next()
    assert wizard.current_step == 4


def test_previous_is_floored_and_unvalidated(client):
    wizard = WizardForm(client)
    wizard.previous()
    assert wizard.current_step == 1
    wizard.current_step = 3
    wizard.previous()
    assert wizard.current_step == 2
    assert wizard.errors == {}


def test_other_subfield_visibility_and_validation(client, payload):
    wizard = WizardForm(client)
    _fill_standard(wizard, payload)
    wizard.current_step = 3
    assert 'challengesOther' not in wizard.visible_fields()
    wizard.toggle('challenges', 'Other')
    assert wizard.data['challenges'] == ['Visa process', 'Other']
    assert 'challengesOther' in wizard.visible_fields()
    assert not wizard.next()
    assert wizard.errors == {'challengesOther': 'Please specify your challenges'}
    wizard.set('challengesOther', 'Getting a bank account')
    assert wizard.errors == {}
    assert wizard.next()


def test_contact_method_required_when_open_to_contact(client, payload):
    wizard = WizardForm(client)
    _fill_standard(wizard, payload)
    wizard.current_step = 3
    wizard.set('openToContact', True)
    assert 'contactMethod' in wizard.visible_fields()
    assert not wizard.next()
    assert list(wizard.errors) == ['contactMethod']


def test_submit_only_from_last_step(client):
    wizard = WizardForm(client)
    with pytest.raises(RuntimeError):
        wizard.submit()


def test_submit_uses_server_reference(client, payload):
    wizard = WizardForm(client)
    _fill_standard(wizard, payload)
    _walk_to_last_step(wizard)
    outcome = wizard.submit()
    assert outcome.ok
    assert outcome.reference_number.startswith('EDU-')
    assert outcome.redirect_to == f'/success?ref={outcome.reference_number}'
    stored = client.get(f'/api/submissions/{outcome.reference_number}').json()
    assert stored['fullName'] == 'Jane Doe'


def test_submit_revalidates_whole_form(client, payload):
    wizard = WizardForm(client)
    _fill_standard(wizard, payload)
    _walk_to_last_step(wizard)
    wizard.set('email', 'broken')
    outcome = wizard.submit()
    assert not outcome.ok
    assert not outcome.retryable
    assert outcome.errors == {'email': 'Invalid email address'}
    assert client.get('/api/submissions').json() == []


def test_extended_wizard_requires_journey(client, extended_payload):
    wizard = WizardForm(client, variant='extended')
    assert wizard.total_steps == 6
    base = {k: v for k, v in extended_payload.items() if k not in ('institutionsPreference', 'programType',
                                                                     'fieldOfStudyAbroad', 'studyReasons',
                                                                     'fundingMethod', 'ieltsScore')}
    wizard.update(**base)
    assert wizard.next() and wizard.next()
    assert wizard.step_label == 'Study Abroad Journey'
    assert not wizard.next()
    assert wizard.errors['studyReasons'] == 'Please select at least one reason'
    wizard.update(**extended_payload)
    _walk_to_last_step(wizard)
    assert wizard.step_label == 'Language Test Scores'
    outcome = wizard.submit()
    assert outcome.ok
    stored = client.get(f'/api/submissions/{outcome.reference_number}').json()
    assert stored['fieldOfStudyAbroad'] == 'Data Science'
    assert stored['ieltsScore'] == '7.5'


def test_transport_failure_keeps_data(payload):
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    with httpx.Client(transport=httpx.MockTransport(handler), base_url='http://api.test') as http:
        wizard = WizardForm(http)
        _fill_standard(wizard, payload)
        _walk_to_last_step(wizard)
        before = dict(wizard.data)
        outcome = wizard.submit()
    assert not outcome.ok
    assert outcome.retryable
    assert outcome.message == SUBMIT_FAILED_MESSAGE
    assert wizard.notification == SUBMIT_FAILED_MESSAGE
    assert wizard.data == before
    assert wizard.reference_number is None


def test_server_error_is_retryable(payload):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(500, json={'error': 'Failed to create submission'})
        return httpx.Response(200, json={'id': '1', 'referenceNumber': 'EDU-RETRY1'})

    with httpx.Client(transport=httpx.MockTransport(handler), base_url='http://api.test') as http:
        wizard = WizardForm(http)
        _fill_standard(wizard, payload)
        _walk_to_last_step(wizard)
        first = wizard.submit()
        second = wizard.submit()
    assert first.retryable
    assert second.ok
    assert second.reference_number == 'EDU-RETRY1'
    assert 'referenceNumber' not in calls[0].read().decode()


def test_server_validation_errors_mapped_to_fields(payload):
    def handler(request):
        return httpx.Response(400, json={
            'error': 'Validation failed',
            'details': 'Validation error: Passport number is required at "passportNumber"',
            'errors': [{'path': ['passportNumber'], 'message': 'Passport number is required'}],
        })

    with httpx.Client(transport=httpx.MockTransport(handler), base_url='http://api.test') as http:
        wizard = WizardForm(http)
        _fill_standard(wizard, payload)
        _walk_to_last_step(wizard)
        outcome = wizard.submit()
    assert not outcome.ok
    assert not outcome.retryable
    assert wizard.errors == {'passportNumber': 'Passport number is required'}


@pytest.mark.parametrize('status, body', [
    (400, '<html>Bad Gateway</html>'),
    (200, '<html>OK</html>'),
    (200, '{"id": "1"}'),
])
def test_unreadable_reply_is_retryable(payload, status, body):
    def handler(request):
        return httpx.Response(status, text=body)

    with httpx.Client(transport=httpx.MockTransport(handler), base_url='http://api.test') as http:
        wizard = WizardForm(http)
        _fill_standard(wizard, payload)
        _walk_to_last_step(wizard)
        before = dict(wizard.data)
        outcome = wizard.submit()
    assert not outcome.ok
    assert outcome.retryable
    assert wizard.notification == SUBMIT_FAILED_MESSAGE
    assert wizard.reference_number is None
    assert wizard.data == before


def test_hidden_other_text_is_not_submitted(client, payload):
    wizard = WizardForm(client)
    _fill_standard(wizard, payload)
    wizard.toggle('challenges', 'Other')
    wizard.set('challengesOther', 'Getting a bank account')
    assert wizard.payload()['challengesOther'] == 'Getting a bank account'
    wizard.toggle('challenges', 'Other')
    wizard.set('contactMethod', 'Email')
    sent = wizard.payload()
    assert 'challengesOther' not in sent
    assert 'contactMethod' not in sent
    assert wizard.data['challengesOther'] == 'Getting a bank account'
