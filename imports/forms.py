"""Forms for data source configuration fragments."""

from django import forms
from django.template.loader import render_to_string

NO_UPLOAD_LOCATION_MESSAGE = (
    "Your system administrator has not defined an upload location. "
    "The file/s available are sample data only"
)
NO_FILES_MESSAGE = "There are no uploaded files available"


class UploadedFileForm(forms.Form):
    """
    Settings for the uploaded-file data source.

    The file select is only present when there are files to choose from;
    ``upload_message`` tells the user why it is missing or why only sample
    files are listed.
    """

    template_name_fragment = "imports/uploaded_file.html"

    hidden_dataSource = forms.CharField(
        widget=forms.HiddenInput, required=False, initial="uploaded_file"
    )
    isFirstRowHeader = forms.BooleanField(
        required=False, label="First row contains column headers"
    )
    file_name = forms.ChoiceField(label="Select File", required=True)

    def __init__(self, *args, available_files=(), upload_message="", **kwargs):
        super().__init__(*args, **kwargs)
        self.available_files = list(available_files)
        self.upload_message = upload_message

        if self.available_files:
            self.fields["file_name"].choices = [(name, name) for name in self.available_files]
            self.fields["file_name"].widget.attrs["class"] = "crm-select2 huge"
        else:
            del self.fields["file_name"]

    def render_fragment(self) -> str:
        """Render the HTML fragment inserted into the data source page."""
        return render_to_string(
            self.template_name_fragment,
            {"form": self, "upload_message": self.upload_message},
        )
