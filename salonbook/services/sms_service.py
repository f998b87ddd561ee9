# Outbound SMS through the Twilio REST API
from typing import Dict, Optional

import httpx
from flask import current_app

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class SmsService:
    """
    Thin Twilio client. Every public method returns a dict with a 'success'
    boolean and a 'message'; nothing here raises to the caller.
    """

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        default_country_code: str = "+91",
        timeout: float = 10.0,
        disabled: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.default_country_code = default_country_code
        self.timeout = timeout
        self.transport = transport
        self.disabled = disabled or not (account_sid and auth_token and from_number)

    @classmethod
    def from_config(cls, config) -> "SmsService":
        return cls(
            account_sid=config.get("SMS_ACCOUNT_SID"),
            auth_token=config.get("SMS_AUTH_TOKEN"),
            from_number=config.get("SMS_FROM_NUMBER"),
            default_country_code=config.get("SMS_DEFAULT_COUNTRY_CODE", "+91"),
            timeout=config.get("SMS_TIMEOUT_SECONDS", 10.0),
            disabled=bool(config.get("TESTING")),
        )

    def format_phone(self, phone_number: str) -> str:
        """Prefix the default country code unless the number is already E.164."""
        cleaned = "".join(ch for ch in phone_number if ch.isdigit() or ch == "+")
        if cleaned.startswith("+"):
            return cleaned
        return f"{self.default_country_code}{cleaned}"

    def send_sms(
        self,
        to_phone: str,
        body: str,
        sender_id: Optional[str] = None,
        auth_token: Optional[str] = None,
    ) -> Dict:
        """
        sender_id and auth_token override the configured From number and
        Twilio auth token; admins can store both in app settings.
        """
        if not to_phone:
            return {"success": False, "message": "No phone number provided"}

        to_phone = self.format_phone(to_phone)

        if self.disabled:
            current_app.logger.info(f"[SMS disabled] to={to_phone}: {body}")
            return {"success": False, "message": "SMS sending is disabled"}

        data = {"To": to_phone, "From": sender_id or self.from_number, "Body": body}

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    TWILIO_MESSAGES_URL.format(sid=self.account_sid),
                    data=data,
                    auth=(self.account_sid, auth_token or self.auth_token),
                )
            if response.status_code >= 400:
                current_app.logger.warning(
                    f"SMS to {to_phone} rejected: {response.status_code} {response.text}"
                )
                return {
                    "success": False,
                    "message": f"SMS gateway returned {response.status_code}",
                }
            sid = response.json().get("sid")
            current_app.logger.info(f"SMS sent to {to_phone} (sid={sid})")
            return {"success": True, "message": "SMS sent successfully"}

        except Exception as e:
            current_app.logger.error(f"Failed to send SMS to {to_phone}: {e}")
            return {"success": False, "message": str(e)}

    def send_appointment_confirmation(
        self,
        phone_number: str,
        readable_id: str,
        salon_name: str,
        when_text: str,
        sender_id: Optional[str] = None,
        auth_token: Optional[str] = None,
    ) -> Dict:
        body = (
            f"Your appointment {readable_id} at {salon_name} on {when_text} "
            f"has been booked. Show this code at the salon."
        )
        return self.send_sms(
            phone_number, body, sender_id=sender_id, auth_token=auth_token
        )

    def send_status_update(
        self,
        phone_number: str,
        readable_id: str,
        salon_name: str,
        status: str,
        sender_id: Optional[str] = None,
        auth_token: Optional[str] = None,
    ) -> Dict:
        label = status.replace("_", " ")
        body = f"Appointment {readable_id} at {salon_name} is now {label}."
        return self.send_sms(
            phone_number, body, sender_id=sender_id, auth_token=auth_token
        )
