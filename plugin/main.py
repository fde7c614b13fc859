# =============================================================================
# VisualEyes Heatmap Client - Command Line Entry Point
# =============================================================================
# Exposes the plugin's three commands over a JSON design document:
#
#   heatmap  - overlay an attention heatmap on an artboard
#   aoi      - heatmap plus per-area attention scores for "AOI" rectangles
#   set-key  - store the VisualEyes API key (prompts with the previous key)
#
# The edited document is written back in place, or to --output.
# =============================================================================

import argparse
import logging
import sys
from typing import Optional

from config import get_config
from plugin.client import PredictionClient
from plugin.credentials import CredentialStore, KeyDialog
from plugin.notify import Notifier, Toast
from plugin.scene import SceneEditor, load_document, save_document
from plugin.workflow import HeatmapWorkflow

logger = logging.getLogger(__name__)


def _print_toast(toast: Toast) -> None:
    print(toast.message.strip())


def prompt_for_key(previous: str) -> Optional[str]:
    """
    Ask for a key on stdin, showing the previous one.

    An empty answer keeps the previous key; Ctrl+C / Ctrl+D cancels.
    """
    print("Set your API key")
    print("Find your API key on https://visualeyes.loceye.io/subscribe.html?tool=adobeXD")
    suffix = f" [{previous}]" if previous else ""
    try:
        answer = input(f"API key{suffix}: ").strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return None
    return answer or (previous if previous else None)


def run_set_key(config, notifier: Notifier, key: Optional[str]) -> int:
    store = CredentialStore.from_config(config)
    if key is not None:
        store.set(key)
        notifier.toast(f"🎉 Your API key is set {key}")
        return 0

    result = KeyDialog(store, prompt_for_key).open()
    if result.submitted:
        notifier.toast(f"🎉 Your API key is set {result.key}")
    return 0


def run_workflow(config, notifier: Notifier, args) -> int:
    document = load_document(args.document)
    editor = SceneEditor(document)

    if args.artboard is not None and editor.select_artboard(args.artboard) is None:
        logger.error("No artboard named %r in %s", args.artboard, args.document)
        editor.select()

    workflow = HeatmapWorkflow(
        editor=editor,
        client=PredictionClient.from_config(config),
        store=CredentialStore.from_config(config),
        notifier=notifier,
        config=config,
    )
    if args.command == "aoi":
        result = workflow.analyze_areas()
    else:
        result = workflow.generate_heatmap()

    # Partial edits (hidden or removed AOI layers) are saved even on failure.
    output = args.output or args.document
    save_document(document, output)
    logger.info("Document written to %s (%s)", output, result.state.value)

    for area in result.areas:
        if area.score is not None:
            print(f"  {area.id}: {area.score:g}%")
    return 0 if result.ok else 1


def main(argv=None) -> int:
    """CLI entry point for the VisualEyes client."""
    parser = argparse.ArgumentParser(
        description="VisualEyes — attention heatmaps for design artboards",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--api-url", type=str, default=None,
        help="Prediction endpoint (overrides config)",
    )
    parser.add_argument(
        "--data-dir", type=str, default=None,
        help="Directory holding settings.txt (overrides config)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("heatmap", "Overlay an attention heatmap on an artboard"),
        ("aoi", "Heatmap plus attention scores for rectangles named 'AOI'"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("document", help="Design document (JSON)")
        sub.add_argument(
            "--artboard", type=str, default=None,
            help="Artboard to select (default: keep the document's selection)",
        )
        sub.add_argument("-o", "--output", type=str, default=None, help="Write result here")

    key_parser = subparsers.add_parser("set-key", help="Store your VisualEyes API key")
    key_parser.add_argument("key", nargs="?", default=None, help="Key (prompted if omitted)")

    args = parser.parse_args(argv)

    config = get_config()
    if args.api_url is not None:
        config.api_url = args.api_url
    if args.data_dir is not None:
        config.data_dir = args.data_dir

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    notifier = Notifier(duration_seconds=config.toast_seconds, display=_print_toast)

    if args.command == "set-key":
        return run_set_key(config, notifier, args.key)
    return run_workflow(config, notifier, args)


if __name__ == "__main__":
    sys.exit(main())
