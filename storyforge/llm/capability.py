"""
Generation capability interface.

The storyboard core talks to generative models only through this protocol:
"given a prompt and optional reference media, return media or None". Every
call receives an explicit CredentialContext instead of reading a key from the
environment, so a key re-selected by the user is picked up by the next call.

Failure contract:
    - transport/model failures return None
    - analyze_script returns raw model output (or None); shaping and
      malformed-output handling belong to the analyzer
    - animate_image / assemble_animatic raise CredentialError when the
      provider reports the billing key as missing or invalid
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Union, runtime_checkable

from storyforge.core.constants import CREDENTIAL_ERROR_SIGNATURE
from storyforge.core.env_loader import get_google_api_key
from storyforge.core.exceptions import MissingConfigError

RawAnalysis = Union[str, dict, None]


@dataclass(frozen=True)
class CredentialContext:
    """API credentials threaded into each capability call."""
    api_key: str

    @classmethod
    def from_env(cls) -> "CredentialContext":
        key = get_google_api_key()
        if not key:
            raise MissingConfigError(
                "No Gemini API key found. Set GEMINI_API_KEY (or GOOGLE_API_KEY) in the environment or .env"
            )
        return cls(api_key=key)

    def __repr__(self) -> str:
        return f"CredentialContext(api_key='...{self.api_key[-4:]}')"


def is_credential_error(error: BaseException) -> bool:
    """True if ``error`` carries the provider's invalid-key signature."""
    return CREDENTIAL_ERROR_SIGNATURE in str(error)


def with_key(uri: str, credentials: CredentialContext) -> str:
    """Append the API key to a provider download URI."""
    separator = "&" if "?" in uri else "?"
    return f"{uri}{separator}key={credentials.api_key}"


@runtime_checkable
class GenerationCapability(Protocol):
    """Async surface the orchestrator and analyzer depend on."""

    async def analyze_script(self, text: str, credentials: CredentialContext) -> RawAnalysis:
        ...

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: str,
        quality_tier: Optional[str],
        credentials: CredentialContext,
    ) -> Optional[str]:
        ...

    async def edit_image(
        self, media_ref: str, instruction: str, credentials: CredentialContext
    ) -> Optional[str]:
        ...

    async def animate_image(
        self, media_ref: str, aspect_ratio: str, credentials: CredentialContext
    ) -> Optional[str]:
        ...

    async def assemble_animatic(
        self, media_refs: Sequence[str], prompt: str, credentials: CredentialContext
    ) -> Optional[str]:
        ...

    async def synthesize_speech(self, text: str, credentials: CredentialContext) -> Optional[bytes]:
        ...
