# assistant.py

import argparse
import asyncio
import json
import logging
from typing import Any, Callable, Optional

from config import Config
from core.event_bus import EventBus
from events.events import (
    DictationError,
    DictationStopped,
    FieldChanged,
    ItemSaved,
    ItemSaveFailed,
    TranscriptUpdated,
)
from inspection.defects import get_defect
from inspection.fields import FIELD_KEYS, ItemForm
from inspection.items_client import ItemsClient, ItemSaveError
from voice.command_parser import CommandParser
from voice.dictation_module import DictationModule
from voice.recognizer import Recognizer, StdinRecognizer, TranscribingRecognizer
from voice.stt_module import STTModule

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class InspectionAssistant:
    """
    Wires the item form, the dictation module and the save / export / back
    collaborators together.
    """

    def __init__(
        self,
        bus: EventBus,
        form: ItemForm,
        items: Optional[ItemsClient],
        recognizer: Optional[Recognizer],
        exporter: Optional[Callable[[ItemForm], Any]] = None,
        on_back: Optional[Callable[[], Any]] = None,
        lang: str = "en-US",
        offline: bool = False,
    ):
        self.bus = bus
        self.form = form
        self.items = items
        self.exporter = exporter
        self.on_back = on_back
        self.offline = offline
        self.dictation = DictationModule(
            bus,
            form,
            recognizer,
            CommandParser(),
            on_submit=self.submit,
            on_export=self.export,
            on_cancel=self.back,
            lang=lang,
        )

    async def submit(self) -> Optional[str]:
        if self.offline or self.items is None:
            logger.info("Offline; item not sent: %s", json.dumps(self.form.to_payload()))
            self.bus.emit(ItemSaved(item_id="offline"))
            return None
        try:
            item_id = await self.items.create(self.form)
        except ItemSaveError as e:
            logger.error("Save failed: %s", e)
            self.bus.emit(ItemSaveFailed(message=str(e)))
            return None
        self.bus.emit(ItemSaved(item_id=item_id))
        return item_id

    def export(self, form: ItemForm):
        if self.exporter is None:
            logger.warning("No exporter configured; export request ignored")
            return None
        return self.exporter(form)

    def back(self):
        if self.on_back is not None:
            return self.on_back()
        logger.info("Cancel requested")
        return None


async def main(argv=None):
    ap = argparse.ArgumentParser(description="Record an inspected die-cast item by voice.")
    ap.add_argument("--settings", help="settings JSON file (default: settings.json)")
    ap.add_argument("--defect", help="defect id from the catalog, e.g. crack")
    ap.add_argument("--field", choices=FIELD_KEYS, help="dictate into a single field")
    ap.add_argument("--clips", nargs="+", metavar="WAV",
                    help="transcribe recorded clips instead of reading stdin")
    args = ap.parse_args(argv)

    config = Config.reload_config(args.settings)
    bus = EventBus()
    form = ItemForm()
    if args.defect:
        defect = get_defect(args.defect)
        if defect is None:
            ap.error(f"unknown defect: {args.defect}")
        form.defect = defect.context()

    if args.clips:
        recognizer = TranscribingRecognizer(STTModule.from_config(config), args.clips)
    else:
        recognizer = StdinRecognizer()

    assistant = InspectionAssistant(
        bus,
        form,
        ItemsClient.from_config(config),
        recognizer,
        lang=config.get("dictation", {}).get("lang", "en-US"),
        offline=config.get("dev_offline", False),
    )

    bus.subscribe(FieldChanged, lambda ev: print(f"[APP] {ev.field} = {ev.value!r}"))
    bus.subscribe(TranscriptUpdated, lambda ev: logger.debug("Heard: %s", ev.text))
    bus.subscribe(DictationError, lambda ev: print(f"[APP] {ev.message}"))
    bus.subscribe(DictationStopped, lambda ev: print(f"[APP] dictation {ev.reason}"))
    bus.subscribe(ItemSaved, lambda ev: print(f"[APP] Saved! id={ev.item_id}"))
    bus.subscribe(ItemSaveFailed, lambda ev: print(f"[APP] Save failed: {ev.message}"))

    if not assistant.dictation.start(args.field):
        return 1
    await assistant.dictation.wait()
    print(json.dumps(form.values(), indent=2))
    return 0


def cli():
    logging.basicConfig(level=logging.INFO)
    try:
        raise SystemExit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    cli()
