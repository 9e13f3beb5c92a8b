"""
StoryForge Main Entry Point

Turn a script file into a storyboard from the command line.
"""

import sys
import argparse
import asyncio
from pathlib import Path

from storyforge.core.config import load_config, set_config
from storyforge.core.constants import AspectRatio, ImageResolution, VisualStyle
from storyforge.core.exceptions import CredentialError, StoryforgeError
from storyforge.core.logging_config import LogLevel, create_session_log, setup_logging, get_logger
from storyforge.llm.capability import CredentialContext
from storyforge.llm.gemini_client import GeminiCapability
from storyforge.storyboard.analyzer import ScriptAnalyzer
from storyforge.storyboard.narration import WavFileSink
from storyforge.storyboard.orchestrator import GenerationOrchestrator
from storyforge.storyboard.session import StoryboardSession
from storyforge.utils.script_import import import_script

KEY_HINT = (
    "The selected API key was rejected. Select a key from a billing-enabled "
    "project (set GEMINI_API_KEY) and try again."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="StoryForge - AI-assisted storyboard generation from a script"
    )

    parser.add_argument(
        "script",
        type=str,
        help="Script file to analyze (.txt, .fdx or .pdf)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to configuration file"
    )

    parser.add_argument(
        "--out", "-o",
        type=str,
        default="storyboard.json",
        help="Where to write the storyboard (default: storyboard.json)"
    )

    parser.add_argument(
        "--generate-all",
        action="store_true",
        help="Generate an image for every panel after analysis"
    )

    parser.add_argument(
        "--animatic",
        action="store_true",
        help="Assemble an animatic from the first generated panels"
    )

    parser.add_argument(
        "--narrate",
        action="store_true",
        help="Write narration WAV files for panels with dialogue"
    )

    parser.add_argument(
        "--style",
        type=VisualStyle.parse,
        help=f"Visual style ({', '.join(s.value for s in VisualStyle)})"
    )

    parser.add_argument(
        "--ratio",
        type=str,
        choices=[r.value for r in AspectRatio],
        help="Frame aspect ratio"
    )

    parser.add_argument(
        "--resolution",
        type=str,
        choices=[r.value for r in ImageResolution],
        help="Pro-tier output size; omit for the fast model"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    return parser


async def run(args, config, credentials: CredentialContext) -> StoryboardSession:
    logger = get_logger("main")

    session = StoryboardSession.from_config(credentials, config.generation)
    if args.style:
        session.style = args.style
    if args.ratio:
        session.aspect_ratio = AspectRatio(args.ratio)
    if args.resolution:
        session.resolution = ImageResolution(args.resolution)

    capability = GeminiCapability(config.models, config.generation)
    script = import_script(args.script)

    result = await ScriptAnalyzer(capability).analyze(session, script)
    if result.is_empty:
        logger.warning("Analysis produced no panels")
        return session

    out_path = Path(args.out)
    orchestrator = GenerationOrchestrator(
        session,
        capability,
        config,
        audio_sink=WavFileSink(out_path.parent / f"{out_path.stem}_audio"),
    )

    if args.generate_all or args.animatic:
        batch = await orchestrator.generate_all()
        print(f"Generated {len(batch.succeeded)}/{batch.total} panel image(s)")
        if batch.credential_errors:
            raise batch.credential_errors[0]

    if args.animatic:
        if await orchestrator.assemble_animatic():
            print(f"Animatic: {session.animatic_url}")
        else:
            print("Animatic could not be assembled")

    if args.narrate:
        for panel in session.panels:
            await orchestrator.narrate(panel.id)

    return session


def main():
    """Main entry point for the StoryForge CLI."""
    args = build_parser().parse_args()

    level = LogLevel.DEBUG if args.debug else LogLevel.INFO
    setup_logging(level=level, verbose=args.debug)
    logger = get_logger("main")
    logger.info("Starting StoryForge...")

    try:
        config = load_config(args.config)
        set_config(config)
        if config.verbose_logging:
            log_file = create_session_log(config.logs_dir, level)
            logger.info(f"Session log: {log_file}")
        credentials = CredentialContext.from_env()
        session = asyncio.run(run(args, config, credentials))
    except CredentialError as e:
        logger.error(str(e))
        print(f"\n✗ {KEY_HINT}")
        sys.exit(2)
    except StoryforgeError as e:
        logger.error(str(e))
        print(f"\n✗ {e}")
        sys.exit(1)

    path = session.save(args.out)
    print(f"Storyboard with {len(session.store)} panel(s) written to {path}")


if __name__ == "__main__":
    main()
