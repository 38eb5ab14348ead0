"""
utils/constants.py

Purpose: Centralized static content

- User-facing response messages
- Checkout metadata markers
- Email templates

(Prevents hardcoding across the codebase)
"""

# ============================================================
# CHECKOUT
# ============================================================

GUEST_USER_MARKER = "guest"
PAYMENT_STATUS_PAID = "paid"

# ============================================================
# RESPONSE MESSAGES
# ============================================================

MISSING_FIELDS_MESSAGE = "Please provide all required fields"
USER_EXISTS_MESSAGE = "User already exists"
USER_NOT_FOUND_MESSAGE = "User not found"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INVALID_PAYMENT_SESSION_MESSAGE = "Invalid payment session"
UNPAID_SESSION_MESSAGE = "Invalid or unpaid session"
PAYMENT_SESSION_NOT_FOUND_MESSAGE = "Payment session not found"
NOT_AUTHORIZED_MESSAGE = "Not authorized, no token"
PASSWORD_TOO_LONG_MESSAGE = "Password must be at most 72 bytes"
INTERNAL_ERROR_MESSAGE = "An internal error occurred. Please try again later."

MAX_PASSWORD_BYTES = 72

# ============================================================
# EMAIL
# ============================================================

WELCOME_EMAIL_SUBJECT = "Welcome to Sleep Haven - Your Account & Receipt"

WELCOME_EMAIL_HTML = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background-color: #4A6FE3; padding: 20px; text-align: center;">
    <h1 style="color: white;">Sleep Haven</h1>
  </div>

  <div style="padding: 20px; border: 1px solid #eee;">
    <h2>Welcome to Sleep Haven, {name}!</h2>
    <p>Your account has been successfully created and your sleep plan is now available.</p>

    <div style="background-color: #f8f9fa; padding: 15px; margin: 20px 0; border-radius: 5px;">
      <h3 style="margin-top: 0;">Receipt Details</h3>
      <p><strong>Payment ID:</strong> {payment_id}</p>
      <p><strong>Amount:</strong> {amount}</p>
      <p><strong>Date:</strong> {date}</p>
      <p><strong>Item:</strong> {item}</p>
    </div>

    <p>You can access your personalized sleep plan by logging into your account at <a href="{site_url}">{site_label}</a>.</p>

    <p>If you have any questions or need assistance, please don't hesitate to contact our support team.</p>

    <p>Sweet dreams,<br>The Sleep Haven Team</p>
  </div>

  <div style="background-color: #f8f9fa; padding: 15px; text-align: center; font-size: 12px; color: #666;">
    <p>&copy; {year} Sleep Haven. All rights reserved.</p>
  </div>
</div>
"""

WELCOME_EMAIL_TEXT = """Welcome to Sleep Haven, {name}!

Your account has been successfully created and your sleep plan is now available.

Receipt Details
Payment ID: {payment_id}
Amount: {amount}
Date: {date}
Item: {item}

Log in at {site_url} to access your personalized sleep plan.

Sweet dreams,
The Sleep Haven Team
"""
