import asyncio
import base64
import binascii
import logging
from typing import Iterable, List
from packages.ivs_core.errors import EncodingFailed
from .dto import Response, EncodedResponse

logger = logging.getLogger("ivs.session.encoder")

_DATA_URI_MARKER = ";base64,"

def strip_data_uri_prefix(text: str) -> str:
    """
    'data:audio/wav;base64,UklGR...' -> 'UklGR...'
    Text without a prefix is returned unchanged.
    """
    if text.startswith("data:") and _DATA_URI_MARKER in text:
        return text.split(_DATA_URI_MARKER, 1)[1]
    return text

def encode_artifact(artifact: bytes) -> str:
    if not isinstance(artifact, (bytes, bytearray, memoryview)):
        raise TypeError(f"Artifact must be binary, got {type(artifact).__name__}")
    return strip_data_uri_prefix(base64.b64encode(bytes(artifact)).decode("ascii"))

def decode_payload(text: str) -> bytes:
    """Inverse of encode_artifact. Accepts an optional data-URI prefix."""
    try:
        return base64.b64decode(strip_data_uri_prefix(text), validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingFailed(f"Invalid base64 payload: {e}") from e

class ResponseEncoder:
    """
    Converts captured artifacts into base64 transport payloads right before submission.
    Items are transcoded concurrently; the batch fails as a whole.
    """

    async def encode_all(self, responses: Iterable[Response]) -> List[EncodedResponse]:
        responses = list(responses)
        results = await asyncio.gather(
            *(asyncio.to_thread(encode_artifact, r.artifact) for r in responses),
            return_exceptions=True
        )

        failed = [
            (r.question_id, result)
            for r, result in zip(responses, results)
            if isinstance(result, BaseException)
        ]
        if failed:
            question_id, error = failed[0]
            logger.error(f"Encoding failed for {len(failed)} response(s), first: {question_id}: {error}")
            raise EncodingFailed(
                "Could not prepare your recordings for submission.",
                details={"question_ids": [qid for qid, _ in failed]}
            ) from error

        return [
            EncodedResponse(question_id=r.question_id, payload=payload)
            for r, payload in zip(responses, results)
        ]
