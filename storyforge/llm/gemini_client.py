"""
StoryForge Gemini Capability

GenerationCapability backed by the google-genai SDK. Script analysis and image
work go through ``generate_content``; clips and animatics through Veo's
``generate_videos`` long-running operations, polled on the event loop; speech
through the TTS model with a prebuilt voice.

One SDK client is kept per API key, so switching the key in the
CredentialContext switches clients on the next call.
"""

from typing import Any, Dict, Optional, Sequence

from google import genai
from google.genai import types

from storyforge.core.config import GenerationConfig, ModelConfig
from storyforge.core.constants import ANIMATIC_ASPECT_RATIO, VIDEO_ASPECT_RATIOS, VIDEO_RESOLUTION
from storyforge.core.exceptions import CredentialError
from storyforge.core.logging_config import get_logger
from storyforge.core.polling import AbortToken, poll_until_done
from storyforge.llm.capability import CredentialContext, RawAnalysis, is_credential_error, with_key
from storyforge.storyboard.media import parse_data_uri, to_data_uri

logger = get_logger("llm.gemini")


ANALYSIS_PROMPT = """You are an expert storyboard artist and cinematographer. Analyze the following movie script.

1. Character visual dictionary: identify the main characters and write one consistent, detailed
   visual description for each (age, hair, clothing, distinguishing facial features).

2. Scene breakdown: split the script into an ordered sequence of storyboard panels.

3. Technical image prompts: for every panel write an 'imagePrompt' that stands on its own for an
   image generator. Replace names and pronouns with the character's visual description, describe
   the setting and lighting explicitly, and state the camera angle and shot type.

Script:
{script}
"""

ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "characters": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "description": {"type": "STRING"},
                },
                "required": ["name", "description"],
            },
        },
        "panels": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "panelNumber": {"type": "INTEGER"},
                    "visualDescription": {
                        "type": "STRING",
                        "description": "A readable summary of the action for the user.",
                    },
                    "imagePrompt": {
                        "type": "STRING",
                        "description": "Technical prompt for the image generator with character and environment detail.",
                    },
                    "shotType": {"type": "STRING"},
                    "dialogue": {"type": "STRING"},
                },
                "required": ["panelNumber", "visualDescription", "imagePrompt", "shotType"],
            },
        },
    },
    "required": ["characters", "panels"],
}


def video_aspect_ratio(aspect_ratio: str) -> str:
    """Veo renders 16:9 and 9:16 only; anything else falls back to 16:9."""
    return aspect_ratio if aspect_ratio in VIDEO_ASPECT_RATIOS else VIDEO_ASPECT_RATIOS[0]


def _image_part(media_ref: str) -> types.Part:
    mime_type, data = parse_data_uri(media_ref)
    return types.Part.from_bytes(data=data, mime_type=mime_type)


def _sdk_image(media_ref: str) -> types.Image:
    mime_type, data = parse_data_uri(media_ref)
    return types.Image(image_bytes=data, mime_type=mime_type)


def _first_inline_data(response) -> Optional[types.Blob]:
    """Return the first inline blob of the first candidate, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return None
    for part in candidates[0].content.parts or []:
        if part.inline_data and part.inline_data.data:
            return part.inline_data
    return None


def _video_uri(operation) -> Optional[str]:
    response = getattr(operation, "response", None)
    videos = getattr(response, "generated_videos", None) or []
    if not videos or videos[0].video is None:
        return None
    return videos[0].video.uri


class GeminiCapability:
    """
    Google Gemini / Veo implementation of GenerationCapability.

    Args:
        models: Model ids and narration voice
        generation: Polling interval and deadline for video operations
        abort_token: Optional token that cancels outstanding video polls
    """

    def __init__(
        self,
        models: Optional[ModelConfig] = None,
        generation: Optional[GenerationConfig] = None,
        abort_token: Optional[AbortToken] = None,
    ):
        self.models = models or ModelConfig()
        self.generation = generation or GenerationConfig()
        self.abort_token = abort_token
        self._clients: Dict[str, genai.Client] = {}

    def _client(self, credentials: CredentialContext) -> genai.Client:
        client = self._clients.get(credentials.api_key)
        if client is None:
            client = genai.Client(api_key=credentials.api_key)
            self._clients[credentials.api_key] = client
        return client

    # =========================================================================
    # TEXT
    # =========================================================================

    async def analyze_script(self, text: str, credentials: CredentialContext) -> RawAnalysis:
        client = self._client(credentials)
        logger.info(f"Requesting script analysis from {self.models.analysis}")

        response = await client.aio.models.generate_content(
            model=self.models.analysis,
            contents=ANALYSIS_PROMPT.format(script=text),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=ANALYSIS_SCHEMA,
            ),
        )
        return response.text or None

    # =========================================================================
    # IMAGES
    # =========================================================================

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: str,
        quality_tier: Optional[str],
        credentials: CredentialContext,
    ) -> Optional[str]:
        """Text-to-image. A quality tier selects the pro model and its output size."""
        model = self.models.image_pro if quality_tier else self.models.image_fast
        image_config = types.ImageConfig(aspect_ratio=aspect_ratio, image_size=quality_tier or None)

        try:
            response = await self._client(credentials).aio.models.generate_content(
                model=model,
                contents=[prompt],
                config=types.GenerateContentConfig(image_config=image_config),
            )
        except Exception as e:
            logger.error(f"Image generation failed ({model}): {e}")
            return None

        blob = _first_inline_data(response)
        if blob is None:
            logger.warning(f"No image returned by {model}")
            return None
        return to_data_uri(blob.data, blob.mime_type or "image/png")

    async def edit_image(
        self, media_ref: str, instruction: str, credentials: CredentialContext
    ) -> Optional[str]:
        """Send an image plus an instruction; used by both edit and outpaint."""
        try:
            response = await self._client(credentials).aio.models.generate_content(
                model=self.models.edit,
                contents=[_image_part(media_ref), instruction],
            )
        except Exception as e:
            logger.error(f"Image edit failed: {e}")
            return None

        blob = _first_inline_data(response)
        if blob is None:
            logger.warning("No image returned by edit model")
            return None
        return to_data_uri(blob.data, blob.mime_type or "image/png")

    # =========================================================================
    # VIDEO
    # =========================================================================

    async def _await_video(self, client: genai.Client, operation, name: str) -> Optional[str]:
        operation = await poll_until_done(
            operation,
            fetch=lambda op: client.aio.operations.get(op),
            is_done=lambda op: bool(op.done),
            interval=self.generation.poll_interval_seconds,
            abort_token=self.abort_token,
            max_wait=self.generation.max_poll_seconds,
            name=name,
        )
        if getattr(operation, "error", None):
            logger.error(f"{name} finished with error: {operation.error}")
            return None
        return _video_uri(operation)

    async def animate_image(
        self, media_ref: str, aspect_ratio: str, credentials: CredentialContext
    ) -> Optional[str]:
        """
        Image-to-video with the fast Veo model.

        Raises:
            CredentialError: the provider rejected the key
        """
        client = self._client(credentials)
        try:
            operation = await client.aio.models.generate_videos(
                model=self.models.video,
                image=_sdk_image(media_ref),
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution=VIDEO_RESOLUTION,
                    aspect_ratio=video_aspect_ratio(aspect_ratio),
                ),
            )
            uri = await self._await_video(client, operation, "video generation")
        except Exception as e:
            if is_credential_error(e):
                raise CredentialError(str(e), operation="animate_image") from e
            logger.error(f"Video generation failed: {e}")
            return None

        return with_key(uri, credentials) if uri else None

    async def assemble_animatic(
        self, media_refs: Sequence[str], prompt: str, credentials: CredentialContext
    ) -> Optional[str]:
        """
        Multi-reference video from up to three stills.

        Raises:
            CredentialError: the provider rejected the key
        """
        client = self._client(credentials)
        try:
            references = [
                types.VideoGenerationReferenceImage(
                    image=_sdk_image(ref),
                    reference_type=types.VideoGenerationReferenceType.ASSET,
                )
                for ref in media_refs
            ]
            operation = await client.aio.models.generate_videos(
                model=self.models.animatic,
                prompt=prompt,
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    reference_images=references,
                    resolution=VIDEO_RESOLUTION,
                    aspect_ratio=ANIMATIC_ASPECT_RATIO,
                ),
            )
            uri = await self._await_video(client, operation, "animatic generation")
        except Exception as e:
            if is_credential_error(e):
                raise CredentialError(str(e), operation="assemble_animatic") from e
            logger.error(f"Animatic generation failed: {e}")
            return None

        return with_key(uri, credentials) if uri else None

    # =========================================================================
    # SPEECH
    # =========================================================================

    async def synthesize_speech(self, text: str, credentials: CredentialContext) -> Optional[bytes]:
        """Returns raw 24 kHz PCM16 audio, or None."""
        try:
            response = await self._client(credentials).aio.models.generate_content(
                model=self.models.speech,
                contents=[text],
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.models.voice),
                        ),
                    ),
                ),
            )
        except Exception as e:
            logger.error(f"TTS failed: {e}")
            return None

        blob = _first_inline_data(response)
        return blob.data if blob is not None else None
