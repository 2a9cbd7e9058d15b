from datetime import date

from django.core.management.base import BaseCommand, CommandError

from bookings.services import complete_past_bookings


class Command(BaseCommand):
    help = "Mark confirmed bookings whose date has passed as completed."

    def add_arguments(self, parser):
        parser.add_argument(
            "--today",
            help="Treat this ISO date (YYYY-MM-DD) as today. Defaults to the local date.",
        )

    def handle(self, *args, **options):
        today = None
        if options.get("today"):
            try:
                today = date.fromisoformat(options["today"])
            except ValueError:
                raise CommandError(f"Invalid date: {options['today']!r}")

        count = complete_past_bookings(today=today)
        self.stdout.write(self.style.SUCCESS(f"Completed {count} booking(s)."))
