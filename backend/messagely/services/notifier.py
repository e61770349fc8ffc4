"""
Out-of-band delivery of password reset codes over SMS (Twilio REST API).

Delivery happens after the code is stored; a failed send does not undo
the issuance, the caller only gets a boolean back.
"""

import logging
from typing import Optional
import httpx
from messagely.core.config import Settings, settings

logger = logging.getLogger(__name__)


class SmsNotifier:
    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        api_base: str = "https://api.twilio.com/2010-04-01",
        to_override: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.api_base = api_base.rstrip("/")
        self.to_override = to_override
        self.timeout = timeout
        # Tests pass httpx.MockTransport here
        self._transport = transport

    @classmethod
    def from_settings(cls, config: Settings, transport: Optional[httpx.BaseTransport] = None) -> "SmsNotifier":
        return cls(
            account_sid=config.TWILIO_ACCOUNT_SID,
            auth_token=config.TWILIO_AUTH_TOKEN,
            from_number=config.TWILIO_FROM_NUMBER,
            api_base=config.TWILIO_API_BASE,
            to_override=config.SMS_TO_OVERRIDE,
            timeout=config.SMS_TIMEOUT_SECONDS,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def send(self, code: str, phone: str) -> bool:
        """Text the reset code to phone. Returns True only on a 2xx response."""
        if not self.configured:
            logger.warning("SMS delivery is not configured; reset code not sent")
            return False

        url = f"{self.api_base}/Accounts/{self.account_sid}/Messages.json"
        payload = {
            "From": self.from_number,
            "To": self.to_override or phone,
            "Body": f"Your new password code is: {code}",
        }
        try:
            with httpx.Client(
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = client.post(url, data=payload)
        except httpx.HTTPError as e:
            logger.error(f"SMS delivery failed: {e.__class__.__name__}: {e}")
            return False

        if not resp.is_success:
            logger.error(f"SMS delivery rejected with status {resp.status_code}")
            return False

        logger.info("Sent reset code SMS")
        return True


sms_notifier = SmsNotifier.from_settings(settings)


def get_notifier() -> SmsNotifier:
    """Dependency returning the process-wide notifier"""
    return sms_notifier
