"""
Uploaded File Data Source - Stages a CSV file picked from the upload folder.

Files are placed in the upload folder out of band (e.g. over sftp by a
sysadmin-managed process); the user only picks one of them. When no upload
folder is configured the bundled sample files are offered instead.

Flow of initialize():
    resolve path -> identify format -> resolve column names -> create staging
    table -> stream sanitized rows in batches -> add tracking columns ->
    record table name and headers on the job
"""

import logging
from contextlib import closing
from itertools import chain
from pathlib import Path
from typing import Any

from django.db import DatabaseError, transaction

from imports.config import FILE_PATTERN, IngestMode, LoaderConfig
from imports.exceptions import InvalidSubmissionError, SourceReadError, UnsupportedFormatError
from imports.forms import NO_FILES_MESSAGE, NO_UPLOAD_LOCATION_MESSAGE, UploadedFileForm
from imports.models import UserJob
from imports.parsers import (
    FORMAT_CSV,
    get_column_names_for_unnamed_columns,
    get_column_names_from_headers,
    identify_format,
    read_rows,
    sanitize_row,
)
from imports.staging import add_tracking_fields_to_table, create_staging_table, stage_rows

from .base import DataSource

logger = logging.getLogger(__name__)

TRUTHY_VALUES = {"1", "true", "on", "yes"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_VALUES
    return bool(value)


class UploadedFileDataSource(DataSource):
    """
    Data source loading a previously uploaded CSV file into a staging table.

    Args:
        user_job: Job holding the submitted values and receiving the result
        config: Loader configuration; read from settings when omitted
    """

    name = "uploaded_file"
    title = "Uploaded file"
    template = UploadedFileForm.template_name_fragment

    def __init__(self, user_job: UserJob | None = None, config: LoaderConfig | None = None):
        super().__init__(user_job)
        self.config = config or LoaderConfig.from_settings()

    def get_submittable_fields(self) -> list[str]:
        return ["file_name", "isFirstRowHeader"]

    # ========== Form ==========

    def get_available_files(self) -> list[str]:
        """Names of the CSV files in the resolved folder, sorted."""
        folder = self.config.resolved_folder
        if not folder.is_dir():
            return []
        return sorted(path.name for path in folder.glob(FILE_PATTERN) if path.is_file())

    def build_form(self, data: dict | None = None) -> UploadedFileForm:
        available_files = self.get_available_files()

        upload_message = ""
        if not self.config.has_configured_folder:
            logger.warning(
                f"[IMPORT] Upload folder {self.config.upload_folder!r} is not available, "
                f"offering sample files from {self.config.sample_folder}"
            )
            upload_message = NO_UPLOAD_LOCATION_MESSAGE
        if not available_files:
            upload_message = NO_FILES_MESSAGE

        return UploadedFileForm(
            data,
            initial=self.get_default_values(),
            available_files=available_files,
            upload_message=upload_message,
        )

    # ========== Staging ==========

    def initialize(self) -> None:
        result = self.upload_to_table()
        self.update_user_job_data_source(
            {
                "table_name": result["import_table_name"],
                "column_headers": result["column_headers"],
                "number_of_columns": result["number_of_columns"],
            }
        )

    def is_first_row_header(self) -> bool:
        return _as_bool(self.get_submitted_value("isFirstRowHeader", False))

    def get_file_path(self) -> Path:
        """
        Resolve the submitted file name inside the resolved folder.

        Raises:
            InvalidSubmissionError: No file selected, or the name is a path
            SourceReadError: The file does not exist
        """
        file_name = self.get_submitted_value("file_name")
        if not file_name:
            raise InvalidSubmissionError("file_name", "a file must be selected")
        if Path(file_name).name != file_name or file_name in (".", ".."):
            raise InvalidSubmissionError("file_name", "must be a file name, not a path")

        file_path = self.config.resolved_folder / file_name
        if not file_path.is_file():
            raise SourceReadError(f"File not found: {file_name}", file_name=file_name)
        return file_path

    def upload_to_table(self) -> dict[str, Any]:
        """
        Load the selected file into a new staging table.

        Returns:
            Dict with import_table_name, number_of_columns and column_headers

        Raises:
            InvalidSubmissionError: The submitted file name is unusable
            SourceReadError: The file cannot be parsed or its headers cannot
                become columns
            UnsupportedFormatError: The file is not delimited text
        """
        file_path = self.get_file_path()
        file_name = file_path.name

        detected_format = identify_format(file_path)
        if detected_format != FORMAT_CSV:
            raise UnsupportedFormatError(file_name, detected_format)

        logger.info(
            f"[IMPORT] Staging {file_name} (first row header: {self.is_first_row_header()}, "
            f"mode: {self.config.ingest_mode.value})"
        )

        with closing(read_rows(file_path, file_name)) as records, transaction.atomic():
            first_record = next(records, None)
            if first_record is None:
                raise SourceReadError("The file contains no rows", file_name=file_name)

            if self.is_first_row_header():
                column_headers = sanitize_row(first_record)
                columns = get_column_names_from_headers(column_headers)
                data_rows = records
                first_record_number = 2
            else:
                columns = get_column_names_for_unnamed_columns(first_record)
                column_headers = list(columns)
                data_rows = chain([first_record], records)
                first_record_number = 1

            try:
                table_name = create_staging_table(columns)
            except DatabaseError as e:
                # Duplicate or unusable column names
                raise SourceReadError(f"invalid column headers: {e}", file_name=file_name) from e
            staged = stage_rows(
                table_name,
                columns,
                self._sanitized_rows(data_rows, len(columns), file_name, first_record_number),
                rows_per_statement=self.config.rows_per_statement,
                limit=self.config.row_limit,
            )
            add_tracking_fields_to_table(table_name)

        if self.config.ingest_mode is IngestMode.PREVIEW:
            logger.info(f"[IMPORT] Preview staged {staged} rows (limit {self.config.row_limit})")

        return {
            "import_table_name": table_name,
            "number_of_columns": len(columns),
            "column_headers": column_headers,
        }

    @staticmethod
    def _sanitized_rows(rows, number_of_columns: int, file_name: str, first_record_number: int):
        """Sanitize rows, rejecting any whose arity differs from the header."""
        for record_number, row in enumerate(rows, start=first_record_number):
            if len(row) != number_of_columns:
                raise SourceReadError(
                    f"record {record_number} has {len(row)} values, expected {number_of_columns}",
                    file_name=file_name,
                )
            yield sanitize_row(row)
