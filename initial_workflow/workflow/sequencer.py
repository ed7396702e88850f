"""Execute the configured steps for the displayed or the selected images."""
from __future__ import annotations

import logging
from typing import Any, List, Sequence

from initial_workflow.core.workflow_log import SEPARATOR
from initial_workflow.host.api import HostError, ImageLoadError, Job, View

from .context import WorkflowContext
from .steps import WorkflowStep


LOGGER = logging.getLogger(__name__)

CANCEL_CHECK_SLEEP_MS = 10


def _stop_job(job: Job) -> None:
    job.valid = False


class Sequencer:
    """Runs steps from the last registered to the first.

    The panel lists the steps in the order of the host's module stack, so
    reverse order follows the pixel pipeline from input to output.
    """

    def __init__(self, context: WorkflowContext, steps: Sequence[WorkflowStep]) -> None:
        self.context = context
        self.steps: List[WorkflowStep] = list(steps)

    def _(self, msgid: str) -> str:
        return self.context.translator.t(msgid)

    # ------------------------------------------------------------------
    # Single pass
    # ------------------------------------------------------------------
    def _prepare_darkroom(self) -> None:
        actions = self.context.actions
        self.context.log.info(self.context.translator.tdt("show only active modules"))
        actions.show_active_modules()
        # scroll the module panel to its top
        actions.show_module("iop/colorout")
        actions.hide_module("iop/colorout")

    def _report_failure(self, what: str, exc: Exception) -> None:
        message = self._("step failed: %s") % exc
        self.context.log.info(message)
        self.context.log.summary_message(message)
        LOGGER.warning("%s failed: %s", what, exc, extra={"component": "Sequencer"}, exc_info=True)

    def _run_step(self, step: WorkflowStep) -> None:
        try:
            step.run()
        except ImageLoadError:
            raise
        except Exception as exc:
            self._report_failure(f"Step {step.label_text}", exc)

    def run_all(self) -> bool:
        """Run every step once; return ``True`` when the run was canceled."""

        context = self.context
        log = context.log
        host = context.host

        log.screen(self._("start initial workflow"))
        log.info(SEPARATOR)
        log.info(self._("process workflow steps"))

        job = host.create_job(self._("process workflow steps"), True, _stop_job)
        canceled = False
        total = len(self.steps)

        try:
            context.sleep(context.options.timeout_ms)
            try:
                self._prepare_darkroom()
            except HostError as exc:
                self._report_failure("Module panel preparation", exc)

            for number, step in enumerate(reversed(self.steps), start=1):
                log.current_step = step.label_text
                log.screen(step.label_text)

                self._run_step(step)

                # give the cancel callback of the progress bar a chance to run
                context.sleep(CANCEL_CHECK_SLEEP_MS)

                if not job.valid:
                    canceled = True
                    log.summary_message(self._("workflow canceled"))
                    break

                if host.is_ending():
                    job.valid = False
                    canceled = True
                    log.summary_message(self._("workflow canceled - darktable shutting down"))
                    break

                job.percent = number / total

            log.current_step = ""
            context.sleep(context.options.timeout_ms)
        finally:
            log.current_step = ""
            if not canceled:
                job.valid = False

        LOGGER.info(
            "Workflow %s after %d steps", "canceled" if canceled else "finished", total,
            extra={"component": "Sequencer"},
        )
        return canceled

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def process_image(self) -> bool:
        """Process the image shown in the darkroom view."""

        log = self.context.log
        log.reset_counters(1, 1)
        log.summary_clear()

        try:
            return self.run_all()
        finally:
            log.flush_summary()

    def _load_image(self, image: Any) -> None:
        context = self.context

        def _display() -> None:
            context.log.info(self._("load new image into darkroom view"))
            context.image_loaded.wait_for(lambda: context.host.display_image(image))

        context.pixelpipe.wait_for(_display)

    def process_selected_images(self) -> bool:
        """Process every image selected in the lighttable view.

        The lighttable view and the selection are restored when the batch
        ends, also after a cancellation or a failed image load.
        """

        context = self.context
        host = context.host
        log = context.log

        log.reset_counters(0, 0)
        log.summary_clear()

        log.info(SEPARATOR)
        log.info(self._("process selected images"))

        images = list(host.action_images() or ())
        if not images:
            log.screen(self._("no image selected"))
            return False

        canceled = False
        try:
            log.info(self._("switch to darkroom view"))
            context.pixelpipe.wait_for(lambda: host.switch_view(View.DARKROOM))

            log.major_max = len(images)
            for index, image in enumerate(images, start=1):
                log.major_nr = index
                log.current_step = ""

                displayed = host.display_image()

                log.info(self._("load image number %s of %s") % (index, len(images)))
                log.info(self._("image file = %s") % getattr(image, "filename", image))

                if displayed != image:
                    self._load_image(image)

                if self.run_all():
                    canceled = True
                    break
        except ImageLoadError as exc:
            log.current_step = ""
            message = self._("processing stopped: %s") % exc
            log.info(message)
            log.summary_message(message)
            LOGGER.error("Batch stopped: %s", exc, extra={"component": "Sequencer"})
        finally:
            log.info(self._("switch to lighttable view"))
            host.switch_view(View.LIGHTTABLE)
            host.set_selection(images)
            log.flush_summary()

        return canceled


__all__ = ["CANCEL_CHECK_SLEEP_MS", "Sequencer"]
