"""
Test cases for the imports management commands.
"""

from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from django.utils import timezone

from imports.models import UserJob
from imports.staging import create_staging_table, table_exists
from tests.fixtures.upload_files import UploadFolderMixin, fetch_rows


class StageUploadedFileCommandTests(UploadFolderMixin, TestCase):
    """Test the stage_uploaded_file command."""

    def call(self, *args):
        out = StringIO()
        with override_settings(IMPORT_UPLOAD_FOLDER=str(self.upload_dir)):
            call_command("stage_uploaded_file", *args, stdout=out)
        return out.getvalue()

    def test_stages_file_with_header(self):
        """Test the command reports the job, table and headers."""
        # Arrange
        self.write_file("contacts.csv", "first_name,email\nAnn,ann@example.org\n")

        # Act
        output = self.call("contacts.csv", "--first-row-header")

        # Assert
        job = UserJob.objects.get()
        self.assertIn(f"Job: {job.job_id}", output)
        self.assertIn(f"Table: {job.staging_table_name}", output)
        self.assertIn("Columns: 2", output)
        self.assertIn("Headers: first_name, email", output)
        self.assertEqual(job.status, UserJob.Status.DRAFT)

    def test_stages_file_without_header(self):
        """Test positional column names are used without a header row."""
        self.write_file("pairs.csv", "x,y\np,q\n")

        output = self.call("pairs.csv")

        self.assertIn("Headers: column_0, column_1", output)
        table_name = UserJob.objects.get().staging_table_name
        self.assertEqual(fetch_rows(table_name, ["column_0", "column_1"]), [("x", "y"), ("p", "q")])

    def test_preview_mode(self):
        """Test preview mode stages only the preview row limit."""
        self.write_file("numbers.csv", "\n".join(str(i) for i in range(30)) + "\n")

        output = self.call("numbers.csv", "--mode", "preview")

        self.assertIn("Mode: preview", output)
        table_name = UserJob.objects.get().staging_table_name
        self.assertEqual(len(fetch_rows(table_name, ["column_0"])), 10)

    def test_batch_size_option(self):
        """Test a custom batch size still stages every row."""
        self.write_file("numbers.csv", "\n".join(str(i) for i in range(30)) + "\n")

        self.call("numbers.csv", "--batch-size", "7")

        table_name = UserJob.objects.get().staging_table_name
        self.assertEqual(len(fetch_rows(table_name, ["column_0"])), 30)

    def test_job_type_option(self):
        """Test the job type option is stored on the job."""
        self.write_file("gifts.csv", "amount\n10\n")

        self.call("gifts.csv", "--first-row-header", "--job-type", "contribution_import")

        self.assertEqual(UserJob.objects.get().job_type, "contribution_import")

    def test_invalid_batch_size(self):
        """Test a non-positive batch size is rejected."""
        with self.assertRaises(CommandError):
            self.call("contacts.csv", "--batch-size", "0")

    def test_parse_failure_raises_command_error(self):
        """Test a parse failure becomes a CommandError and fails the job."""
        self.write_file("short.csv", "a,b\n1\n")

        with self.assertRaises(CommandError) as ctx:
            self.call("short.csv", "--first-row-header")

        self.assertTrue(str(ctx.exception).startswith("Spreadsheet not loaded. "))
        self.assertEqual(UserJob.objects.get().status, UserJob.Status.FAILED)

    def test_unknown_file(self):
        """Test a missing file is reported by name."""
        with self.assertRaises(CommandError) as ctx:
            self.call("missing.csv")

        self.assertIn("File not found: missing.csv", str(ctx.exception))


class CleanupImportJobsCommandTests(TestCase):
    """Test the cleanup_import_jobs command."""

    def setUp(self):
        self.job = UserJob.objects.create()
        self.job.update_data_source({"table_name": create_staging_table(["a"])})
        UserJob.objects.filter(pk=self.job.pk).update(
            created_at=timezone.now() - timedelta(hours=48)
        )

    def test_expires_jobs(self):
        """Test old jobs are expired and their tables dropped."""
        out = StringIO()
        call_command("cleanup_import_jobs", "--hours", "24", stdout=out)

        self.job.refresh_from_db()
        self.assertIn("Expired 1 jobs", out.getvalue())
        self.assertEqual(self.job.status, UserJob.Status.EXPIRED)
        self.assertFalse(table_exists(self.job.staging_table_name))

    def test_dry_run(self):
        """Test dry run counts jobs without changing them."""
        out = StringIO()
        call_command("cleanup_import_jobs", "--hours", "24", "--dry-run", stdout=out)

        self.job.refresh_from_db()
        self.assertIn("Would expire 1 jobs", out.getvalue())
        self.assertEqual(self.job.status, UserJob.Status.DRAFT)
        self.assertTrue(table_exists(self.job.staging_table_name))

    def test_recent_jobs_are_kept(self):
        """Test jobs younger than the cutoff are kept."""
        out = StringIO()
        call_command("cleanup_import_jobs", "--hours", "72", stdout=out)

        self.assertIn("Expired 0 jobs", out.getvalue())

    def test_negative_hours(self):
        """Test a negative age is rejected."""
        with self.assertRaises(CommandError):
            call_command("cleanup_import_jobs", hours=-1, stdout=StringIO())
