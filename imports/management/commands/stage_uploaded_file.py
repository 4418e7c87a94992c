"""
Django management command to stage an uploaded file without the web form.

Creates an import job for the uploaded-file data source and loads the file
into a new staging table, printing the table name and column headers.

Usage:
    python manage.py stage_uploaded_file contacts.csv --first-row-header
    python manage.py stage_uploaded_file contacts.csv --mode preview
    python manage.py stage_uploaded_file contacts.csv --batch-size 500
"""

from dataclasses import replace

from django.core.management.base import BaseCommand, CommandError

from imports.config import IngestMode, LoaderConfig
from imports.exceptions import ImportServiceError
from imports.services import create_user_job, initialize_data_source


class Command(BaseCommand):
    help = 'Stage a file from the upload folder into a new import staging table'

    def add_arguments(self, parser):
        parser.add_argument(
            'file_name',
            type=str,
            help='Name of a CSV file in the upload folder (or the sample folder)',
        )
        parser.add_argument(
            '--first-row-header',
            action='store_true',
            help='Treat the first row as column headers',
        )
        parser.add_argument(
            '--mode',
            choices=[mode.value for mode in IngestMode],
            default=None,
            help='Ingest mode (default: IMPORT_INGEST_MODE setting)',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=None,
            help='Rows per INSERT statement in full mode (default: IMPORT_BATCH_SIZE setting)',
        )
        parser.add_argument(
            '--job-type',
            type=str,
            default='contact_import',
            help='Job type recorded on the import job (default: contact_import)',
        )

    def handle(self, *args, **options):
        """Create the job and run the uploaded-file data source."""
        config = LoaderConfig.from_settings()
        overrides = {}
        if options['mode']:
            overrides['ingest_mode'] = options['mode']
        if options['batch_size'] is not None:
            if options['batch_size'] < 1:
                raise CommandError('--batch-size must be >= 1')
            overrides['batch_size'] = options['batch_size']
        if overrides:
            config = replace(config, **overrides)

        self.stdout.write(self.style.MIGRATE_HEADING('=== Stage Uploaded File ==='))
        self.stdout.write(f'Folder: {config.resolved_folder}')
        self.stdout.write(f'Mode: {config.ingest_mode.value}')
        self.stdout.write('')

        job = create_user_job(
            None,
            'uploaded_file',
            {
                'file_name': options['file_name'],
                'isFirstRowHeader': options['first_row_header'],
            },
            job_type=options['job_type'],
        )

        try:
            result = initialize_data_source(job, config=config)
        except ImportServiceError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(self.style.SUCCESS(f'Job: {job.job_id}'))
        self.stdout.write(f'Table: {result["table_name"]}')
        self.stdout.write(f'Columns: {result["number_of_columns"]}')
        self.stdout.write(f'Headers: {", ".join(result["column_headers"])}')
