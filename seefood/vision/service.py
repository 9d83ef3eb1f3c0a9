# -*- coding: utf-8 -*-
"""Vision — food photo analysis pipeline.

One call walks a fixed sequence of states::

    IDLE -> OPTIMIZING -> REQUESTING -> AWAITING_RESPONSE -> DECODING
         -> EXTRACTING -> NORMALIZING -> PERSISTING_IMAGE -> DONE

Any failure before PERSISTING_IMAGE moves the run to FAILED and the error is
raised to the caller. Saving the image copy is best effort: a failure there is
logged and the records are still returned.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Protocol
from uuid import UUID

from PIL import Image

from ..config import Settings
from ..credentials import (
    GEMINI_API_KEY,
    ChainedCredentialStore,
    CredentialStore,
    EnvCredentialStore,
    FileCredentialStore,
)
from .errors import AnalysisError, HTTPError, InvalidResponse, NetworkError, NoValidCandidates
from .images import ImageOptimizer, load_image
from .models import EncodedImage, NutritionRecord
from .parsing import decode_envelope, extract_json_block, normalize_records
from .request import InferenceRequest, build_request
from .transport import FixtureTransport, HttpxTransport, Transport, TransportResponse

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    IDLE = "idle"
    OPTIMIZING = "optimizing"
    REQUESTING = "requesting"
    AWAITING_RESPONSE = "awaiting_response"
    DECODING = "decoding"
    EXTRACTING = "extracting"
    NORMALIZING = "normalizing"
    PERSISTING_IMAGE = "persisting_image"
    DONE = "done"
    FAILED = "failed"


_NEXT: Dict[AnalysisState, AnalysisState] = {
    AnalysisState.IDLE: AnalysisState.OPTIMIZING,
    AnalysisState.OPTIMIZING: AnalysisState.REQUESTING,
    AnalysisState.REQUESTING: AnalysisState.AWAITING_RESPONSE,
    AnalysisState.AWAITING_RESPONSE: AnalysisState.DECODING,
    AnalysisState.DECODING: AnalysisState.EXTRACTING,
    AnalysisState.EXTRACTING: AnalysisState.NORMALIZING,
    AnalysisState.NORMALIZING: AnalysisState.PERSISTING_IMAGE,
    AnalysisState.PERSISTING_IMAGE: AnalysisState.DONE,
}

TERMINAL_STATES: FrozenSet[AnalysisState] = frozenset({AnalysisState.DONE, AnalysisState.FAILED})

StateObserver = Callable[[AnalysisState], None]


class ImageStore(Protocol):
    def save_image(self, image: Image.Image, meal_id: UUID | str) -> Path: ...


@dataclass
class AnalysisRun:
    """State of a single analysis call. Never shared between calls."""

    state: AnalysisState = AnalysisState.IDLE
    history: List[AnalysisState] = field(default_factory=lambda: [AnalysisState.IDLE])
    records: List[NutritionRecord] = field(default_factory=list)
    error: Optional[AnalysisError] = None
    image_path: Optional[Path] = None
    observer: Optional[StateObserver] = None

    @property
    def succeeded(self) -> bool:
        return self.state is AnalysisState.DONE

    def advance(self, state: AnalysisState) -> None:
        if _NEXT.get(self.state) is not state:
            raise RuntimeError(f"illegal transition {self.state.value} -> {state.value}")
        self._enter(state)

    def fail(self, error: AnalysisError) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"run already finished in {self.state.value}")
        self.error = error
        self.records = []
        self._enter(AnalysisState.FAILED)

    def _enter(self, state: AnalysisState) -> None:
        self.state = state
        self.history.append(state)
        if self.observer is not None:
            self.observer(state)


class FoodAnalyzer:
    """Sends a meal photo to Gemini and returns the estimated food items."""

    def __init__(
        self,
        *,
        credentials: CredentialStore,
        transport: Transport,
        base_url: str,
        optimizer: Optional[ImageOptimizer] = None,
        image_store: Optional[ImageStore] = None,
        observer: Optional[StateObserver] = None,
    ) -> None:
        self.credentials = credentials
        self.transport = transport
        self.base_url = base_url
        self.optimizer = optimizer or ImageOptimizer()
        self.image_store = image_store
        self.observer = observer

    def analyze(self, image: Image.Image) -> List[NutritionRecord]:
        run = self.execute(image)
        if run.error is not None:
            raise run.error
        return run.records

    def analyze_bytes(self, data: bytes) -> List[NutritionRecord]:
        return self.analyze(load_image(data))

    def execute(self, image: Image.Image) -> AnalysisRun:
        """Run the pipeline once and return the finished run (DONE or FAILED)."""
        run = AnalysisRun(observer=self.observer)
        started = time.monotonic()
        try:
            run.advance(AnalysisState.OPTIMIZING)
            encoded = self.optimizer.optimize(image)

            run.advance(AnalysisState.REQUESTING)
            request = self._build_request(encoded)

            run.advance(AnalysisState.AWAITING_RESPONSE)
            response = self._send(request)

            run.advance(AnalysisState.DECODING)
            envelope = decode_envelope(response.content)

            run.advance(AnalysisState.EXTRACTING)
            text = envelope.first_text()
            block = extract_json_block(text) if text is not None else None
            if block is None:
                logger.error("No valid candidates in response")
                raise NoValidCandidates()
            logger.debug("Extracted JSON: %s", block)

            run.advance(AnalysisState.NORMALIZING)
            records = normalize_records(block)
        except AnalysisError as exc:
            logger.error("Analysis failed while %s: %s", run.state.value, exc)
            run.fail(exc)
            return run

        logger.info("Successfully parsed %d food items", len(records))
        run.records = records
        run.advance(AnalysisState.PERSISTING_IMAGE)
        run.image_path = self._persist_image(encoded, records[0].id)
        run.advance(AnalysisState.DONE)
        logger.info("Analysis finished in %.0f ms", (time.monotonic() - started) * 1000)
        return run

    def _build_request(self, encoded: EncodedImage) -> InferenceRequest:
        api_key = self.credentials.get_secret(GEMINI_API_KEY) or ""
        request = build_request(
            api_key,
            encoded.to_base64(),
            base_url=self.base_url,
            mime_type=encoded.mime_type,
        )
        logger.info("API request: POST %s", request.redacted_url)
        logger.debug("Image payload size: %d bytes", len(encoded.encoded_bytes))
        return request

    def _send(self, request: InferenceRequest) -> TransportResponse:
        try:
            response = self.transport.send(request.url, request.body)
        except AnalysisError:
            raise
        except Exception as exc:
            # Third-party transports may raise their own types (timeouts, cancellation).
            raise NetworkError(exc) from exc
        if not isinstance(response, TransportResponse):
            logger.error("Invalid response type: %s", type(response).__name__)
            raise InvalidResponse(f"transport returned {type(response).__name__}")
        if not response.ok:
            logger.error("HTTP error: %s", response.status_code)
            raise HTTPError(response.status_code)
        return response

    def _persist_image(self, encoded: EncodedImage, key: UUID) -> Optional[Path]:
        if self.image_store is None:
            return None
        try:
            path = self.image_store.save_image(encoded.display_image, key)
        except Exception as exc:
            # The photo copy is best effort; the records are already computed.
            logger.error("Failed to save analyzed image: %s", exc)
            return None
        logger.info("Saved analyzed image to: %s", path)
        return path


def build_analyzer(
    cfg: Settings,
    *,
    credentials: Optional[CredentialStore] = None,
    transport: Optional[Transport] = None,
) -> FoodAnalyzer:
    """Wire an analyzer from settings; a configured mock response replaces the network."""
    if credentials is None:
        credentials = ChainedCredentialStore(
            EnvCredentialStore(),
            FileCredentialStore(cfg.credentials_file),
        )
    if transport is None:
        if cfg.mock_response is not None:
            logger.warning("Using fixture transport from %s", cfg.mock_response)
            transport = FixtureTransport.from_file(cfg.mock_response)
        else:
            transport = HttpxTransport(timeout=cfg.gemini_timeout)
    optimizer = ImageOptimizer(
        max_dimension=cfg.max_image_dimension,
        compression_quality=cfg.jpeg_quality,
        images_dir=cfg.images_dir,
    )
    return FoodAnalyzer(
        credentials=credentials,
        transport=transport,
        base_url=cfg.gemini_base_url,
        optimizer=optimizer,
        image_store=optimizer,
    )
