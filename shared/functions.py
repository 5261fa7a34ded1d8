"""
Gateway for Supabase Edge Functions.

Server-side validation and payment orchestration live in edge functions;
the client only posts JSON bodies and reads JSON back.
"""

import json
import logging
from typing import Any, Optional

from supabase import Client

from .exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class EdgeFunctionGateway:
    """Invokes edge functions through the Supabase client."""

    def __init__(self, db: Client) -> None:
        self._db = db

    def invoke(self, name: str, body: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Call an edge function and decode its JSON response.

        Args:
            name: Edge function name (e.g. "provider-financials")
            body: JSON body to send

        Returns:
            Decoded response object (empty dict for an empty response)

        Raises:
            ExternalServiceError: If the call fails or the response isn't a JSON object
        """
        options: dict[str, Any] = {"responseType": "json"}
        if body is not None:
            options["body"] = body

        try:
            raw = self._db.functions.invoke(name, invoke_options=options)
        except Exception as e:
            logger.warning(f"Edge function {name} failed: {e}")
            raise ExternalServiceError(
                f"Edge function {name} failed: {e}",
                service=name,
                code="EDGE_FUNCTION_FAILED",
            ) from e

        return self._decode(name, raw)

    @staticmethod
    def _decode(name: str, raw: Any) -> dict[str, Any]:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        if isinstance(raw, str):
            if not raw.strip():
                return {}
            try:
                raw = json.loads(raw)
            except ValueError as e:
                raise ExternalServiceError(
                    f"Edge function {name} returned invalid JSON",
                    service=name,
                    code="EDGE_FUNCTION_BAD_RESPONSE",
                ) from e
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ExternalServiceError(
                f"Edge function {name} returned an unexpected payload",
                service=name,
                code="EDGE_FUNCTION_BAD_RESPONSE",
                details={"payload_type": type(raw).__name__},
            )
        if raw.get("error"):
            raise ExternalServiceError(
                str(raw["error"]),
                service=name,
                code="EDGE_FUNCTION_ERROR",
            )
        return raw
