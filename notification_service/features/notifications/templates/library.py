"""Built-in notification templates.

Email ids are kebab-case (``appointment-confirmation``); SMS and WhatsApp ids
are camelCase (``appointmentConfirmation``), matching the event table.
"""

from __future__ import annotations

from notification_service.features.notifications.templates.registry import (
    ChatTemplate,
    EmailTemplate,
    NotificationTemplate,
    SmsTemplate,
    TemplateRegistry,
)

_LAYOUT = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{{ company_name }}</title></head>
<body style="font-family: Arial, sans-serif; color: #1f2937;">
<div style="max-width: 600px; margin: 0 auto; padding: 24px;">
<h1 style="color: #1e3a8a;">{{ company_name }}</h1>
%s
<hr>
<p style="font-size: 12px; color: #6b7280;">
Need help? Email {{ support_email }} or call {{ support_phone }}.<br>
&copy; {{ current_year }} {{ company_name }}. All rights reserved.
</p>
</div>
</body>
</html>
"""


def _layout(body: str) -> str:
    return _LAYOUT % body


EMAIL_TEMPLATES: tuple[EmailTemplate, ...] = (
    EmailTemplate(
        template_id="welcome",
        subject="Welcome to {{ company_name }}, {{ first_name or 'Valued Client' }}!",
        html=_layout(
            "<p>Dear {{ first_name }},</p>"
            "<p>Thank you for choosing {{ company_name }} for your legal needs.</p>"
            "<ul><li>Book appointments online</li><li>Track your cases in real time</li>"
            "<li>Upload documents securely</li><li>Chat with your advocate</li></ul>"
            '<p><a href="{{ dashboard_link() }}">Open your dashboard</a></p>',
        ),
        required_fields=("first_name",),
    ),
    EmailTemplate(
        template_id="appointment-confirmation",
        subject="Appointment Confirmed - {{ appointment_date | format_date('long') }}",
        html=_layout(
            "<p>Dear {{ first_name }},</p>"
            "<p>Your appointment with <strong>{{ advocate_name }}</strong> is confirmed.</p>"
            "<p>Date: {{ appointment_date | format_date('long') }}<br>"
            "Time: {{ appointment_time }}"
            "{% if location %}<br>Location: {{ location }}{% endif %}</p>"
            '<p><a href="{{ dashboard_link(\'/appointments\') }}">View appointment</a></p>',
        ),
        required_fields=("first_name", "appointment_date", "appointment_time", "advocate_name"),
    ),
    EmailTemplate(
        template_id="appointment-reminder",
        subject="Appointment Reminder - {{ appointment_date | format_date('long') }} at {{ appointment_time }}",
        html=_layout(
            "<p>Dear {{ first_name }},</p>"
            "<p>This is a reminder of your appointment with <strong>{{ advocate_name }}</strong> "
            "on {{ appointment_date | format_date('long') }} at {{ appointment_time }}.</p>"
            "<p>Please arrive 10 minutes early and bring any relevant documents.</p>",
        ),
        required_fields=("first_name", "appointment_date", "appointment_time", "advocate_name"),
    ),
    EmailTemplate(
        template_id="case-update",
        subject="Case Update: {{ case_title }}",
        html=_layout(
            "<p>Dear {{ first_name }},</p>"
            "<p>There is an update on <strong>{{ case_title }}</strong>.</p>"
            '<p>Status: <span class="status-{{ status | status_class }}">{{ status }}</span></p>'
            "<p>{{ update_message }}</p>"
            '<p><a href="{{ dashboard_link(\'/cases\') }}">View case</a></p>',
        ),
        required_fields=("first_name", "case_title", "status", "update_message"),
    ),
    EmailTemplate(
        template_id="payment-confirmation",
        subject="Payment Confirmed - {{ amount | format_currency }}",
        html=_layout(
            "<p>Dear {{ first_name }},</p>"
            "<p>We have received your payment.</p>"
            "<p>Amount: {{ amount | format_currency }}<br>"
            "Transaction ID: {{ transaction_id }}<br>"
            "Service: {{ service }}</p>"
            "<p>A receipt is available on your dashboard.</p>",
        ),
        required_fields=("first_name", "amount", "transaction_id", "service"),
    ),
    EmailTemplate(
        template_id="document-request",
        subject="Documents Required - {{ case_title }}",
        html=_layout(
            "<p>Dear {{ first_name }},</p>"
            "<p>Your advocate needs the following documents for <strong>{{ case_title }}</strong>:</p>"
            "<p>{{ document_list }}</p>"
            "{% if due_date %}<p>Please upload them by {{ due_date | format_date('long') }}.</p>{% endif %}"
            '<p><a href="{{ dashboard_link(\'/documents\') }}">Upload documents</a></p>',
        ),
        required_fields=("first_name", "case_title", "document_list"),
    ),
    EmailTemplate(
        template_id="hearing-notice",
        subject="Court Hearing Notice - {{ case_title }}",
        html=_layout(
            "<p>Dear {{ first_name }},</p>"
            "<p>You have a court appearance for <strong>{{ case_title }}</strong>.</p>"
            "<p>Date: {{ hearing_date | format_date('long') }}<br>"
            "Time: {{ hearing_time }}<br>"
            "Location: {{ court_location }}</p>"
            "<p>Please arrive at least 30 minutes early with all required documents.</p>",
        ),
        required_fields=("first_name", "case_title", "hearing_date", "hearing_time", "court_location"),
    ),
    EmailTemplate(
        template_id="password-reset",
        subject="Password Reset Request - {{ company_name }}",
        html=_layout(
            "<p>Dear {{ first_name }},</p>"
            "<p>We received a request to reset your password.</p>"
            '<p><a href="{{ reset_link }}">Reset your password</a></p>'
            "<p>If you did not request this, you can ignore this email.</p>",
        ),
        text=(
            "Dear {{ first_name }},\n\n"
            "We received a request to reset your password. Open this link to continue:\n"
            "{{ reset_link }}\n\n"
            "If you did not request this, you can ignore this email.\n\n"
            "- {{ company_name }}"
        ),
        required_fields=("first_name", "reset_link"),
    ),
    EmailTemplate(
        template_id="emergency-contact",
        subject="URGENT: Message from {{ company_name }}",
        html=_layout(
            "<p>Dear {{ first_name }},</p>"
            "<p><strong>{{ emergency_message }}</strong></p>"
            "<p>Call us immediately on {{ support_phone }}.</p>",
        ),
        required_fields=("first_name", "emergency_message"),
    ),
)


SMS_TEMPLATES: tuple[SmsTemplate, ...] = (
    SmsTemplate(
        template_id="welcome",
        text="Welcome to {{ company_name }}, {{ first_name }}! Manage your cases and appointments at {{ website_url }}",
        required_fields=("first_name",),
    ),
    SmsTemplate(
        template_id="appointmentConfirmation",
        text=(
            "Hi {{ first_name }}, your appointment with {{ advocate_name }} on "
            "{{ appointment_date | format_date }} at {{ appointment_time }} is confirmed. - {{ company_name }}"
        ),
        required_fields=("first_name", "appointment_date", "appointment_time", "advocate_name"),
    ),
    SmsTemplate(
        template_id="appointmentReminder",
        text=(
            "Reminder: {{ first_name }}, you meet {{ advocate_name }} on "
            "{{ appointment_date | format_date }} at {{ appointment_time }}. - {{ company_name }}"
        ),
        required_fields=("first_name", "appointment_date", "appointment_time", "advocate_name"),
    ),
    SmsTemplate(
        template_id="caseUpdate",
        text=(
            "{{ company_name }}: {{ case_title | truncate_text(40) }} is now {{ status }}. "
            "{{ update_message | truncate_text(60) }}"
        ),
        required_fields=("case_title", "status", "update_message"),
    ),
    SmsTemplate(
        template_id="paymentConfirmation",
        text=(
            "Payment of {{ amount | format_currency }} received for {{ service | truncate_text(40) }}. "
            "Ref: {{ transaction_id }}. Thank you. - {{ company_name }}"
        ),
        required_fields=("amount", "transaction_id", "service"),
    ),
    SmsTemplate(
        template_id="documentRequest",
        text=(
            "Hi {{ first_name }}, documents are needed for {{ case_title | truncate_text(40) }}. "
            "Please upload them on your dashboard. - {{ company_name }}"
        ),
        required_fields=("first_name", "case_title"),
    ),
    SmsTemplate(
        template_id="hearingNotice",
        text=(
            "COURT: {{ case_title | truncate_text(30) }} on {{ hearing_date | format_date }} "
            "at {{ hearing_time }}, {{ court_location | truncate_text(30) }}. Arrive 30 min early."
        ),
        required_fields=("case_title", "hearing_date", "hearing_time", "court_location"),
    ),
    SmsTemplate(
        template_id="passwordReset",
        text="{{ company_name }}: a password reset was requested for your account. Check your email for the link.",
    ),
    SmsTemplate(
        template_id="emergencyContact",
        text="URGENT from {{ company_name }}: {{ emergency_message | truncate_text(100) }} Call {{ support_phone }}",
        required_fields=("emergency_message",),
    ),
)


CHAT_TEMPLATES: tuple[ChatTemplate, ...] = (
    ChatTemplate(
        template_id="welcome",
        text=(
            "Welcome to {{ company_name }}, {{ first_name }}!\n\n"
            "Thank you for choosing us for your legal needs. Here's what you can do:\n\n"
            "- Book appointments online\n"
            "- Track your cases in real time\n"
            "- Upload documents securely\n"
            "- Chat with your advocate\n\n"
            "Need help? Just reply to this message or call us at {{ support_phone }}.\n\n"
            "- {{ company_name }} Team"
        ),
        required_fields=("first_name",),
    ),
    ChatTemplate(
        template_id="appointmentConfirmation",
        text=(
            "Hi {{ first_name }}, your appointment is confirmed.\n\n"
            "Advocate: {{ advocate_name }}\n"
            "Date: {{ appointment_date | format_date('long') }}\n"
            "Time: {{ appointment_time }}\n\n"
            "- {{ company_name }} Team"
        ),
        required_fields=("first_name", "appointment_date", "appointment_time", "advocate_name"),
    ),
    ChatTemplate(
        template_id="appointmentReminder",
        text=(
            "Appointment reminder\n\n"
            "Hi {{ first_name }}, you are meeting {{ advocate_name }} on "
            "{{ appointment_date | format_date('long') }} at {{ appointment_time }}.\n\n"
            "- {{ company_name }} Team"
        ),
        required_fields=("first_name", "appointment_date", "appointment_time", "advocate_name"),
    ),
    ChatTemplate(
        template_id="caseUpdate",
        text=(
            "Case update\n\n"
            "Hi {{ first_name }},\n"
            "Case: {{ case_title }}\n"
            "Status: {{ status }}\n\n"
            "{{ update_message }}\n\n"
            "- {{ company_name }} Team"
        ),
        required_fields=("first_name", "case_title", "status", "update_message"),
    ),
    ChatTemplate(
        template_id="paymentConfirmation",
        text=(
            "Payment confirmed\n\n"
            "Amount: {{ amount | format_currency }}\n"
            "Transaction ID: {{ transaction_id }}\n"
            "Service: {{ service }}\n\n"
            "Thank you for your payment. A receipt has been sent to your email.\n\n"
            "- {{ company_name }} Team"
        ),
        required_fields=("amount", "transaction_id", "service"),
    ),
    ChatTemplate(
        template_id="documentRequest",
        text=(
            "Documents required\n\n"
            "Hi {{ first_name }}, please provide the following for {{ case_title }}:\n"
            "{{ document_list }}\n\n"
            "Upload them at {{ dashboard_link('/documents') }}\n\n"
            "- {{ company_name }} Team"
        ),
        required_fields=("first_name", "case_title", "document_list"),
    ),
    ChatTemplate(
        template_id="hearingNotice",
        text=(
            "Important court reminder\n\n"
            "Hi {{ first_name }},\n\n"
            "Case: {{ case_title }}\n"
            "Date: {{ hearing_date | format_date('long') }}\n"
            "Time: {{ hearing_time }}\n"
            "Location: {{ court_location }}\n\n"
            "Please arrive at least 30 minutes early. Bring all required documents.\n\n"
            "- {{ company_name }} Team"
        ),
        required_fields=("first_name", "case_title", "hearing_date", "hearing_time", "court_location"),
    ),
    ChatTemplate(
        template_id="emergencyContact",
        text=(
            "URGENT\n\n"
            "Hi {{ first_name }},\n\n"
            "{{ emergency_message }}\n\n"
            "Please call us immediately on {{ support_phone }}.\n\n"
            "- {{ company_name }} Team"
        ),
        required_fields=("first_name", "emergency_message"),
    ),
)


BUILTIN_TEMPLATES: tuple[NotificationTemplate, ...] = (
    *EMAIL_TEMPLATES,
    *SMS_TEMPLATES,
    *CHAT_TEMPLATES,
)


def build_default_registry() -> TemplateRegistry:
    """Return a fresh registry preloaded with the built-in templates."""
    return TemplateRegistry(BUILTIN_TEMPLATES)
