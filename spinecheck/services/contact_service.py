"""Forward consultation requests to an EmailJS template."""
import logging

import httpx

from spinecheck.config import Settings
from spinecheck.schemas.analysis import AnalysisResult
from spinecheck.schemas.contact import ContactRequest
from spinecheck.services.credentials import ConfigResolver
from spinecheck.services.interpreter import format_angle
from spinecheck.storage import StoragePort
from spinecheck.utils.exceptions import EmailServiceUnavailable, SubmissionError

logger = logging.getLogger(__name__)


class ContactSubmitter:
    def __init__(self, settings: Settings, storage: StoragePort, transport: httpx.AsyncBaseTransport | None = None):
        self._url = settings.emailjs_url
        self._public_key = ConfigResolver([settings.emailjs_public_key], storage, "emailjs_public_key")
        self._service_id = ConfigResolver([settings.emailjs_service_id], storage, "emailjs_service_id")
        self._template_id = ConfigResolver([settings.emailjs_template_id], storage, "emailjs_template_id")
        self._transport = transport

    @staticmethod
    def template_params(form: ContactRequest, last_result: AnalysisResult | None) -> dict:
        params = {k: str(v) for k, v in form.model_dump().items()}
        params["cobb_angle"] = format_angle(last_result)
        params["classification"] = last_result.classification.value if last_result else ""
        return params

    async def submit(self, form: ContactRequest, last_result: AnalysisResult | None) -> None:
        public_key = self._public_key.resolve()
        service_id = self._service_id.resolve()
        template_id = self._template_id.resolve()
        if not (public_key and service_id and template_id):
            logger.error("EmailJS not configured (public key, service id or template id missing)")
            raise EmailServiceUnavailable()

        body = {
            "service_id": service_id,
            "template_id": template_id,
            "user_id": public_key,
            "template_params": self.template_params(form, last_result),
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=15.0) as client:
                response = await client.post(self._url, json=body)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("EmailJS rejected submission: %s %s", e.response.status_code, e.response.text[:200])
            raise SubmissionError() from e
        except httpx.HTTPError as e:
            logger.warning("EmailJS request failed: %s", e)
            raise SubmissionError() from e

        logger.info("Consultation request sent (template=%s)", template_id)
