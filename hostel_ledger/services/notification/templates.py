"""
HTML templates for student emails and printable receipts.
"""

from typing import Any, Dict

import jinja2
from jinja2 import DictLoader, Environment, select_autoescape

from hostel_ledger.config.settings import settings
from hostel_ledger.core.logging import get_logger
from hostel_ledger.utils.formatters import format_amount, format_long_datetime

logger = get_logger(__name__)


class TemplateRenderError(Exception):
    """Raised when a template cannot be rendered."""
    pass


REGISTRATION_EMAIL = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Welcome to {{ hostel_name }}</title>
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: #4f46e5; color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
    <h1 style="margin: 0; font-size: 28px;">Welcome to {{ hostel_name }}!</h1>
  </div>
  <div style="background: #f9fafb; padding: 30px; border-radius: 0 0 10px 10px;">
    <p style="font-size: 16px;">Dear <strong>{{ student_name }}</strong>,</p>
    <p>Your room has been allocated. Here are the details of your stay:</p>
    <table style="width: 100%; border-collapse: collapse; background: white; border-radius: 8px;">
      <tr>
        <td style="padding: 12px; color: #6b7280;">Room</td>
        <td style="padding: 12px; font-weight: bold;">{{ room_number }}</td>
      </tr>
      <tr>
        <td style="padding: 12px; color: #6b7280;">Amount Paid</td>
        <td style="padding: 12px; font-weight: bold; color: #10b981;">{{ amount_paid | money }} {{ currency }}</td>
      </tr>
      <tr>
        <td style="padding: 12px; color: #6b7280;">Balance</td>
        <td style="padding: 12px; font-weight: bold; color: #dc2626;">{{ balance | money }} {{ currency }}</td>
      </tr>
    </table>
    <p style="margin-top: 20px;">Thank you for choosing {{ hostel_name }}.</p>
  </div>
</body>
</html>
"""

RECEIPT = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Payment Receipt - {{ receipt.receipt_number }}</title>
  <style>
    @media print {
      body { margin: 0; padding: 0; }
      .no-print { display: none !important; }
    }
  </style>
</head>
<body style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 0; padding: 20px; background: #f5f5f5;">
  <div style="max-width: 800px; margin: 0 auto; background: white; border-radius: 12px; overflow: hidden;">
    <div style="background: #4f46e5; padding: 40px 30px; text-align: center; color: white;">
      <h1 style="margin: 0; font-size: 32px; letter-spacing: 1px;">PAYMENT RECEIPT</h1>
      <p style="margin: 10px 0 0 0; font-size: 18px;">{{ receipt.hostel_name }}</p>
    </div>
    <div style="background: #f8fafc; padding: 20px 30px; border-bottom: 2px solid #e5e7eb;">
      <p style="margin: 0; color: #6b7280; font-size: 14px; text-transform: uppercase;">Receipt Number</p>
      <p style="margin: 5px 0 0 0; font-size: 24px; font-weight: 700;">#{{ receipt.receipt_number }}</p>
      <p style="margin: 10px 0 0 0; color: #6b7280; font-size: 14px; text-transform: uppercase;">Date</p>
      <p style="margin: 5px 0 0 0; font-size: 16px;">{{ receipt.payment_date | long_datetime }}</p>
    </div>
    <div style="padding: 30px; border-bottom: 1px solid #e5e7eb;">
      <h2 style="margin: 0 0 20px 0; font-size: 20px;">Student Information</h2>
      <table style="width: 100%; border-collapse: collapse;">
        <tr><td style="padding: 12px 0; color: #6b7280; width: 40%;">Student Name:</td><td style="padding: 12px 0;">{{ receipt.student_name }}</td></tr>
        <tr><td style="padding: 12px 0; color: #6b7280;">Registration Number:</td><td style="padding: 12px 0;">{{ receipt.registration_number }}</td></tr>
        <tr><td style="padding: 12px 0; color: #6b7280;">Phone Number:</td><td style="padding: 12px 0;">{{ receipt.student_phone or 'N/A' }}</td></tr>
        <tr><td style="padding: 12px 0; color: #6b7280;">Room Number:</td><td style="padding: 12px 0; font-weight: 700;">{{ receipt.room_number or 'N/A' }}</td></tr>
      </table>
    </div>
    <div style="padding: 30px; background: #f9fafb; border-bottom: 1px solid #e5e7eb;">
      <h2 style="margin: 0 0 20px 0; font-size: 20px;">Payment Details</h2>
      <table style="width: 100%; border-collapse: collapse;">
        <tr><td style="padding: 15px;">Total Required:</td><td style="padding: 15px; text-align: right; font-weight: 700;">{{ currency }} {{ receipt.total_required | money(2) }}</td></tr>
        <tr><td style="padding: 15px;">Amount Paid:</td><td style="padding: 15px; text-align: right; font-weight: 700; color: #10b981;">{{ currency }} {{ receipt.amount_paid | money(2) }}</td></tr>
        <tr style="background: {{ '#fef2f2' if receipt.balance > 0 else '#f0fdf4' }};"><td style="padding: 15px; font-weight: 700;">Balance:</td><td style="padding: 15px; text-align: right; font-weight: 700; color: {{ '#dc2626' if receipt.balance > 0 else '#16a34a' }};">{{ currency }} {{ receipt.balance | money(2) }}</td></tr>
      </table>
    </div>
    <div style="padding: 30px; background: #fef3c7;">
      <h3 style="margin: 0 0 15px 0; font-size: 16px;">For Inquiries</h3>
      <p style="margin: 0;"><strong>Hostel Contact:</strong> {{ receipt.hostel_contact_phone or 'N/A' }}<br>
      Please contact us if you have any questions regarding this receipt.</p>
    </div>
    <div style="background: #1f2937; padding: 20px 30px; text-align: center; color: #9ca3af; font-size: 12px;">
      <p style="margin: 0;">This is an official receipt from {{ receipt.hostel_name }}</p>
      <p style="margin: 5px 0 0 0;">Generated on {{ generated_at | long_datetime }}</p>
    </div>
  </div>
</body>
</html>
"""


class TemplateEngine:
    """Notification template engine"""

    TEMPLATES = {
        "registration_email.html": REGISTRATION_EMAIL,
        "receipt.html": RECEIPT,
    }

    def __init__(self, currency: str = None):
        self.currency = currency or settings.CURRENCY
        self.env = Environment(
            loader=DictLoader(self.TEMPLATES),
            autoescape=select_autoescape(['html', 'xml']),
        )
        self.env.filters["money"] = format_amount
        self.env.filters["long_datetime"] = format_long_datetime

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a named template; ``currency`` is always available."""
        try:
            template = self.env.get_template(template_name)
            return template.render(currency=self.currency, **context)
        except jinja2.TemplateError as e:
            logger.error(f"Template rendering failed for {template_name}: {str(e)}")
            raise TemplateRenderError(f"Template rendering failed: {str(e)}") from e


template_engine = TemplateEngine()
