from orly_batch.models import BatchSummary


class BatchCoordinator:
    """
    Runs the Item Processor over a manifest, one item at a time.
    A failed item is counted and reported; the batch carries on.
    """

    def __init__(self, processor, display):
        self.processor = processor
        self.display = display

    def run(self, items):
        total = len(items)
        success_count = 0
        failure_count = 0

        self.display.info(f"Found {total} books to download")
        for item in items:
            result = self.processor.process(item)
            if result.succeeded:
                success_count += 1
            else:
                failure_count += 1
                self.display.error(f"Failed to download book: {item.identifier}")

            self.display.progress(success_count + failure_count, total)

        summary = BatchSummary(total=total, success_count=success_count, failure_count=failure_count)
        self.display.summary(summary)
        return summary
