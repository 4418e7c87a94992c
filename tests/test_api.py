"""
API tests for the imports router.

The router is exercised through Ninja's TestClient; the initialize endpoint
stages real files from a temporary upload folder.
"""

import uuid

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from ninja.testing import TestClient

from imports.api import imports_router
from imports.forms import NO_FILES_MESSAGE
from imports.models import UserJob
from imports.staging import table_exists
from tests.fixtures.upload_files import XLSX_BYTES, UploadFolderMixin, staging_tables


class ImportsAPITestCase(UploadFolderMixin, TestCase):
    """Base test case with a client bound to the upload folder."""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.api_client = TestClient(imports_router)

    def setUp(self):
        super().setUp()
        settings_override = override_settings(IMPORT_UPLOAD_FOLDER=str(self.upload_dir))
        settings_override.enable()
        self.addCleanup(settings_override.disable)

    def create_job(self, **submitted_values):
        response = self.api_client.post(
            "/jobs",
            json={"data_source": "uploaded_file", "submitted_values": submitted_values},
        )
        self.assertEqual(response.status_code, 200)
        return response.json()["data"]["job_id"]


class DataSourceListTests(ImportsAPITestCase):
    """Test GET /datasources."""

    def test_lists_uploaded_file(self):
        """Test the uploaded file data source is listed with its template."""
        # Act
        response = self.api_client.get("/datasources")

        # Assert
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["code"], 200)
        self.assertIn(
            {
                "name": "uploaded_file",
                "title": "Uploaded file",
                "template": "imports/uploaded_file.html",
            },
            data["data"],
        )


class CreateJobTests(ImportsAPITestCase):
    """Test POST /jobs."""

    def test_creates_draft_job(self):
        """Test a job is created in draft keeping only submittable fields."""
        # Act
        response = self.api_client.post(
            "/jobs",
            json={
                "data_source": "uploaded_file",
                "submitted_values": {"file_name": "contacts.csv", "isFirstRowHeader": True, "extra": 1},
            },
        )

        # Assert
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["status"], "draft")
        self.assertEqual(
            data["submitted_values"],
            {
                "file_name": "contacts.csv",
                "isFirstRowHeader": True,
                "dataSource": "uploaded_file",
            },
        )
        self.assertTrue(UserJob.objects.filter(job_id=data["job_id"]).exists())

    def test_data_source_name_is_normalized(self):
        """Test the data source name is trimmed and lowercased."""
        response = self.api_client.post("/jobs", json={"data_source": " Uploaded_File "})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["submitted_values"], {"dataSource": "uploaded_file"})

    def test_unknown_data_source(self):
        """Test an unregistered data source is rejected with its error code."""
        response = self.api_client.post("/jobs", json={"data_source": "sql_query"})

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertIn("Unknown data source", body["detail"])
        self.assertEqual(body["error_code"], "UNKNOWN_DATA_SOURCE")


class DataSourceFormTests(ImportsAPITestCase):
    """Test GET /jobs/{job_id}/form."""

    def test_form_lists_files(self):
        """Test the form lists files in the upload folder."""
        # Arrange
        self.write_file("contacts.csv", "a\n1\n")
        job_id = self.create_job()

        # Act
        response = self.api_client.get(f"/jobs/{job_id}/form")

        # Assert
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["data_source"], "uploaded_file")
        self.assertEqual(data["available_files"], ["contacts.csv"])
        self.assertEqual(data["upload_message"], "")
        self.assertEqual(data["submittable_fields"], ["file_name", "isFirstRowHeader"])
        self.assertEqual(data["default_values"], {})
        self.assertIn('name="file_name"', data["html"])

    def test_form_without_files(self):
        """Test an empty upload folder yields the no-files message."""
        job_id = self.create_job()

        data = self.api_client.get(f"/jobs/{job_id}/form").json()["data"]

        self.assertEqual(data["available_files"], [])
        self.assertEqual(data["upload_message"], NO_FILES_MESSAGE)

    def test_form_for_unknown_job(self):
        """Test an unknown job id returns 404."""
        response = self.api_client.get(f"/jobs/{uuid.uuid4()}/form")

        self.assertEqual(response.status_code, 404)


class InitializeTests(ImportsAPITestCase):
    """Test POST /jobs/{job_id}/initialize."""

    def test_stages_file(self):
        """Test a valid file is staged and the result returned."""
        # Arrange
        self.write_file("contacts.csv", "first_name,last_name\nBetty,O'Brien\n")
        job_id = self.create_job(file_name="contacts.csv", isFirstRowHeader=True)

        # Act
        response = self.api_client.post(f"/jobs/{job_id}/initialize")

        # Assert
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Data staged successfully")
        self.assertEqual(body["data"]["job_id"], job_id)
        self.assertEqual(body["data"]["column_headers"], ["first_name", "last_name"])
        self.assertEqual(body["data"]["number_of_columns"], 2)
        self.assertTrue(table_exists(body["data"]["table_name"]))

    def test_malformed_file_is_a_configuration_error(self):
        """Test an arity mismatch returns 400 and fails the job."""
        # Arrange
        self.write_file("short.csv", "a,b\n1\n")
        job_id = self.create_job(file_name="short.csv", isFirstRowHeader=True)

        # Act
        response = self.api_client.post(f"/jobs/{job_id}/initialize")

        # Assert
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertTrue(body["detail"].startswith("Spreadsheet not loaded. "))
        self.assertEqual(body["error_code"], "SOURCE_READ_ERROR")
        self.assertEqual(body["details"]["file_name"], "short.csv")
        self.assertEqual(UserJob.objects.get(job_id=job_id).status, UserJob.Status.FAILED)

    def test_duplicate_headers_are_a_configuration_error(self):
        """Test repeated header names return 400 instead of a server error."""
        # Arrange
        self.write_file("dupes.csv", "Name,Name\n1,2\n")
        job_id = self.create_job(file_name="dupes.csv", isFirstRowHeader=True)
        before = staging_tables()

        # Act
        response = self.api_client.post(f"/jobs/{job_id}/initialize")

        # Assert
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertTrue(body["detail"].startswith("Spreadsheet not loaded. "))
        self.assertEqual(body["error_code"], "SOURCE_READ_ERROR")
        self.assertEqual(UserJob.objects.get(job_id=job_id).status, UserJob.Status.FAILED)
        self.assertEqual(staging_tables(), before)

    def test_missing_file_name(self):
        """Test a job without a file name returns 400."""
        job_id = self.create_job(isFirstRowHeader=True)

        response = self.api_client.post(f"/jobs/{job_id}/initialize")

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertTrue(body["detail"].startswith("Invalid file_name"))
        self.assertEqual(body["error_code"], "INVALID_SUBMISSION")
        self.assertEqual(body["details"]["field"], "file_name")

    def test_unsupported_format_is_an_internal_error(self):
        """Test a workbook returns 500 and creates no staging table."""
        # Arrange
        self.write_bytes("contacts.csv", XLSX_BYTES)
        job_id = self.create_job(file_name="contacts.csv")
        before = staging_tables()

        # Act
        response = self.api_client.post(f"/jobs/{job_id}/initialize")

        # Assert
        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertIn("xlsx", body["detail"])
        self.assertEqual(body["error_code"], "UNSUPPORTED_FORMAT")
        self.assertEqual(body["details"], {"file_name": "contacts.csv", "detected_format": "xlsx"})
        self.assertEqual(staging_tables(), before)

    def test_invalid_job_id(self):
        """Test a malformed job id returns 400."""
        response = self.api_client.post("/jobs/not-a-uuid/initialize")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Invalid job_id format")

    def test_unknown_job(self):
        """Test an unknown job id returns 404."""
        response = self.api_client.post(f"/jobs/{uuid.uuid4()}/initialize")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Import job not found")


class JobStatusTests(ImportsAPITestCase):
    """Test GET /jobs/{job_id} and GET /jobs."""

    def test_status_after_initialize(self):
        """Test the job status carries the staging result."""
        # Arrange
        self.write_file("contacts.csv", "a,b\n1,2\n")
        job_id = self.create_job(file_name="contacts.csv", isFirstRowHeader=True)
        self.api_client.post(f"/jobs/{job_id}/initialize")

        # Act
        response = self.api_client.get(f"/jobs/{job_id}")

        # Assert
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["status"], "draft")
        self.assertIsNone(data["error_message"])
        self.assertEqual(data["data_source"]["column_headers"], ["a", "b"])
        self.assertTrue(data["data_source"]["table_name"].startswith("import_tmp_"))

    def test_status_after_failure(self):
        """Test a failed initialize is visible in the job status."""
        job_id = self.create_job(file_name="missing.csv")
        self.api_client.post(f"/jobs/{job_id}/initialize")

        data = self.api_client.get(f"/jobs/{job_id}").json()["data"]

        self.assertEqual(data["status"], "failed")
        self.assertEqual(data["error_message"], "Spreadsheet not loaded. File not found: missing.csv")

    def test_list_jobs_for_anonymous_requests(self):
        """Test anonymous requests only see jobs without a user."""
        # Arrange
        first = self.create_job()
        second = self.create_job()
        user = get_user_model().objects.create_user(username="importer", password="x")
        UserJob.objects.create(user=user)

        # Act
        data = self.api_client.get("/jobs").json()["data"]

        # Assert
        self.assertEqual(data["total"], 2)
        self.assertEqual({job["job_id"] for job in data["jobs"]}, {first, second})

    def test_list_jobs_for_user(self):
        """Test authenticated requests only see their own jobs."""
        # Arrange
        user = get_user_model().objects.create_user(username="importer", password="x")
        job = UserJob.objects.create(user=user)
        self.create_job()

        # Act
        data = self.api_client.get("/jobs", user=user).json()["data"]

        # Assert
        self.assertEqual(data["total"], 1)
        self.assertEqual(data["jobs"][0]["job_id"], str(job.job_id))

    def test_list_jobs_pagination(self):
        """Test page and page_size slice the job list."""
        for _ in range(3):
            self.create_job()

        data = self.api_client.get("/jobs?page=2&page_size=2").json()["data"]

        self.assertEqual(data["total"], 3)
        self.assertEqual(data["page"], 2)
        self.assertEqual(len(data["jobs"]), 1)
