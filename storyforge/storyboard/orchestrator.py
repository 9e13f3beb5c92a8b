"""
Generation Orchestrator

Drives every slow, failure-prone generation step against a StoryboardSession:

    image:     Idle -> Generating -> Idle (+ image | unchanged on failure)
               entered by generate, regenerate, edit, outpaint
    video:     Idle -> Generating -> Idle (+ clip  | unchanged on failure)
               requires an image; never attempted without one
    narration: is_playing_audio is held from request until playback ends
    animatic:  one request with up to three reference stills

Each operation sets its flag, issues exactly one capability call and clears
the flag when the call settles. Results are written through the store's
latest-state update, so operations finishing out of order never overwrite
each other's work. There is no automatic retry: a failed panel is simply
available to be triggered again.

Credential rejections are the one failure that is not absorbed: the flag is
cleared and CredentialError propagates so the caller can ask for a new key.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from storyforge.core.config import StoryforgeConfig, get_config
from storyforge.core.constants import ANIMATIC_MAX_REFERENCES
from storyforge.core.exceptions import CompositingError, CredentialError
from storyforge.core.logging_config import get_logger
from storyforge.llm.capability import GenerationCapability
from storyforge.storyboard.narration import AudioSink, NullAudioSink, build_waveform
from storyforge.storyboard.outpaint import OutpaintDirection, expand_data_uri
from storyforge.storyboard.prompt_composer import (
    compose_animatic_prompt,
    compose_edit_prompt,
    compose_image_prompt,
    compose_outpaint_prompt,
    select_animatic_panels,
)
from storyforge.storyboard.session import StoryboardSession

logger = get_logger("storyboard.orchestrator")


class OperationOutcome(Enum):
    """How a per-panel operation settled."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class OperationKind(Enum):
    """Independent pipelines per panel, each with its own flag."""
    IMAGE = "is_generating_image"
    VIDEO = "is_generating_video"
    AUDIO = "is_playing_audio"


@dataclass
class BatchOutcome:
    """Summary of a fan-out over several panels."""
    outcomes: Dict[str, OperationOutcome] = field(default_factory=dict)
    credential_errors: List[CredentialError] = field(default_factory=list)

    @property
    def succeeded(self) -> List[str]:
        return [pid for pid, o in self.outcomes.items() if o is OperationOutcome.SUCCEEDED]

    @property
    def failed(self) -> List[str]:
        return [pid for pid, o in self.outcomes.items() if o is OperationOutcome.FAILED]

    @property
    def total(self) -> int:
        return len(self.outcomes)


class GenerationOrchestrator:
    """
    Issues generation calls for a session and writes results back.

    Usage:
        orchestrator = GenerationOrchestrator(session, GeminiCapability(config))
        await orchestrator.generate_image(panel.id)
        await orchestrator.generate_all()
    """

    def __init__(
        self,
        session: StoryboardSession,
        capability: GenerationCapability,
        config: Optional[StoryforgeConfig] = None,
        audio_sink: Optional[AudioSink] = None,
    ):
        self.session = session
        self.capability = capability
        self.config = config or get_config()
        self.audio_sink = audio_sink or NullAudioSink()

    @property
    def store(self):
        return self.session.store

    # ------------------------------------------------------------------
    # Flag bookkeeping
    # ------------------------------------------------------------------

    def _begin(self, panel_id: str, kind: OperationKind) -> bool:
        """Raise the flag for ``kind``. False means the operation must not run."""
        panel = self.store.get_panel(panel_id)
        if panel is None:
            logger.warning(f"Panel {panel_id} not found, skipping {kind.name.lower()} operation")
            return False
        if getattr(panel, kind.value) and self.config.generation.suppress_duplicates:
            logger.info(f"Panel {panel.panel_number} already busy ({kind.name.lower()}), ignoring trigger")
            return False
        self.store.set_activity(panel_id, **{kind.value: True})
        return True

    def _finish(self, panel_id: str, kind: OperationKind, **changes) -> bool:
        """Clear the flag and apply ``changes`` in one latest-state update."""
        if self.store.get_panel(panel_id) is None:
            logger.warning(f"Panel {panel_id} disappeared before its {kind.name.lower()} result arrived")
            self._release(panel_id, kind)
            return False
        self.store.update_panel(panel_id, **{kind.value: False}, **changes)
        return True

    def _release(self, panel_id: str, kind: OperationKind) -> None:
        """Lower the flag for ``kind`` without writing a result."""
        self.store.set_activity(panel_id, **{kind.value: False})

    async def _run_image_operation(
        self,
        panel_id: str,
        label: str,
        call: Callable[[], Awaitable[Optional[str]]],
    ) -> OperationOutcome:
        """Shared Generating -> Idle cycle for every image-producing call."""
        if not self._begin(panel_id, OperationKind.IMAGE):
            return OperationOutcome.SKIPPED

        logger.info(f"{label} started for {panel_id}")
        settled = False
        try:
            media_ref = await call()
            if media_ref:
                settled = True
                # a new still invalidates any clip derived from the old one
                if not self._finish(panel_id, OperationKind.IMAGE, image_url=media_ref, video_url=None):
                    return OperationOutcome.FAILED
                logger.info(f"{label} finished for {panel_id}")
                return OperationOutcome.SUCCEEDED
        except CompositingError as e:
            logger.warning(f"{label} failed for {panel_id}: {e}")
        except CredentialError:
            raise
        except Exception as e:
            logger.error(f"{label} failed for {panel_id}: {e}")
        finally:
            # also runs on cancellation, which bypasses the handlers above
            if not settled:
                self._release(panel_id, OperationKind.IMAGE)

        return OperationOutcome.FAILED

    # ------------------------------------------------------------------
    # Image pipeline
    # ------------------------------------------------------------------

    async def generate_image(self, panel_id: str) -> OperationOutcome:
        """Generate (or regenerate from scratch) the still for a panel."""
        panel = self.store.get_panel(panel_id)
        if panel is None:
            return OperationOutcome.SKIPPED

        session = self.session
        prompt = compose_image_prompt(panel, session.style, session.characters)
        quality = session.resolution.value if session.resolution else None

        return await self._run_image_operation(
            panel_id,
            "Image generation",
            lambda: self.capability.generate_image(
                prompt, session.aspect_ratio.value, quality, session.credentials
            ),
        )

    regenerate_image = generate_image

    async def edit_image(self, panel_id: str, instruction: str) -> OperationOutcome:
        """Apply a natural-language edit to a panel's existing still."""
        panel = self.store.get_panel(panel_id)
        if panel is None or not panel.has_image or not instruction.strip():
            return OperationOutcome.SKIPPED

        source = panel.image_url
        prompt = compose_edit_prompt(instruction)
        return await self._run_image_operation(
            panel_id,
            "Image edit",
            lambda: self.capability.edit_image(source, prompt, self.session.credentials),
        )

    async def outpaint_image(self, panel_id: str, direction: OutpaintDirection) -> OperationOutcome:
        """Expand a panel's still toward ``direction`` and have the provider fill it."""
        panel = self.store.get_panel(panel_id)
        if panel is None or not panel.has_image:
            return OperationOutcome.SKIPPED

        direction = OutpaintDirection(direction)
        source = panel.image_url
        factor = self.config.generation.outpaint_expansion

        async def call() -> Optional[str]:
            expanded = expand_data_uri(source, direction, factor)
            return await self.capability.edit_image(
                expanded, compose_outpaint_prompt(direction), self.session.credentials
            )

        return await self._run_image_operation(panel_id, f"Outpaint ({direction.value})", call)

    async def generate_all(self) -> BatchOutcome:
        """
        Generate stills for every panel without one, concurrently.

        Each panel settles on its own; a failure (including a credential
        rejection) never cancels the others. Credential errors are collected
        on the outcome for the caller to surface once.
        """
        pending = [p.id for p in self.store.panels if not p.has_image]
        batch = BatchOutcome()
        if not pending:
            return batch

        logger.info(f"Generating {len(pending)} panel image(s)")
        semaphore = asyncio.Semaphore(self.config.generation.batch_concurrency)

        async def bounded(panel_id: str) -> OperationOutcome:
            async with semaphore:
                return await self.generate_image(panel_id)

        results = await asyncio.gather(*(bounded(pid) for pid in pending), return_exceptions=True)

        for panel_id, result in zip(pending, results):
            if isinstance(result, CredentialError):
                batch.credential_errors.append(result)
                batch.outcomes[panel_id] = OperationOutcome.FAILED
            elif isinstance(result, BaseException):
                logger.error(f"Unexpected failure for {panel_id}: {result}")
                batch.outcomes[panel_id] = OperationOutcome.FAILED
            else:
                batch.outcomes[panel_id] = result

        logger.info(f"Batch finished: {len(batch.succeeded)}/{batch.total} succeeded")
        return batch

    # ------------------------------------------------------------------
    # Video pipeline
    # ------------------------------------------------------------------

    async def animate_panel(self, panel_id: str) -> OperationOutcome:
        """
        Turn a panel's still into a short clip.

        Raises:
            CredentialError: the provider rejected the selected key
        """
        panel = self.store.get_panel(panel_id)
        if panel is None or not panel.has_image:
            return OperationOutcome.SKIPPED
        if not self._begin(panel_id, OperationKind.VIDEO):
            return OperationOutcome.SKIPPED

        source = panel.image_url
        logger.info(f"Animation started for {panel_id}")
        settled = False
        try:
            video_url = await self.capability.animate_image(
                source, self.session.aspect_ratio.value, self.session.credentials
            )
            if not video_url:
                return OperationOutcome.FAILED

            current = self.store.get_panel(panel_id)
            if current is None or current.image_url != source:
                # the still changed while animating; the clip belongs to the old one
                logger.warning(f"Discarding clip for {panel_id}: source image was replaced")
                return OperationOutcome.FAILED

            settled = True
            self._finish(panel_id, OperationKind.VIDEO, video_url=video_url)
            logger.info(f"Animation finished for {panel_id}")
            return OperationOutcome.SUCCEEDED
        except CredentialError:
            raise
        except Exception as e:
            logger.error(f"Animation failed for {panel_id}: {e}")
            return OperationOutcome.FAILED
        finally:
            if not settled:
                self._release(panel_id, OperationKind.VIDEO)

    async def assemble_animatic(self) -> Optional[str]:
        """
        Build a short multi-panel animatic from the first image-bearing panels.

        Returns:
            The video reference, or None when fewer than two of the first
            three panels have a still or the provider fails.

        Raises:
            CredentialError: the provider rejected the selected key
        """
        chosen = select_animatic_panels(self.store.panels, ANIMATIC_MAX_REFERENCES)
        if chosen is None:
            logger.info("Animatic needs at least two generated stills among the first three panels")
            return None

        prompt = compose_animatic_prompt(chosen, self.session.characters)
        references = [p.image_url for p in chosen]
        logger.info(f"Assembling animatic from panels {[p.panel_number for p in chosen]}")

        try:
            video_url = await self.capability.assemble_animatic(
                references, prompt, self.session.credentials
            )
        except CredentialError:
            raise
        except Exception as e:
            logger.error(f"Animatic assembly failed: {e}")
            return None

        if video_url:
            self.session.animatic_url = video_url
            logger.info("Animatic ready")
        return video_url or None

    # ------------------------------------------------------------------
    # Narration
    # ------------------------------------------------------------------

    async def narrate(self, panel_id: str) -> OperationOutcome:
        """Synthesize and play a panel's dialogue; the flag spans playback."""
        panel = self.store.get_panel(panel_id)
        if panel is None or not panel.dialogue.strip():
            return OperationOutcome.SKIPPED
        if not self._begin(panel_id, OperationKind.AUDIO):
            return OperationOutcome.SKIPPED

        outcome = OperationOutcome.FAILED
        try:
            raw = await self.capability.synthesize_speech(panel.dialogue, self.session.credentials)
            if raw:
                waveform = build_waveform(
                    raw,
                    sample_rate=self.config.generation.sample_rate,
                    label=f"panel_{panel.panel_number}",
                )
                await self.audio_sink.play(waveform)
                outcome = OperationOutcome.SUCCEEDED
        except Exception as e:
            logger.error(f"Audio playback error for {panel_id}: {e}")
        finally:
            self._release(panel_id, OperationKind.AUDIO)

        return outcome
