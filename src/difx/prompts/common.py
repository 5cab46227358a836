"""Shared prompt components."""

# Appended to the diff prompt so the model marks colored spans the way the
# renderer resolves them. Exactly one of these goes into a prompt.
MARKUP_INSTRUCTIONS = {
    "tags": """\
IMPORTANT: For colored text, wrap spans in the following markers:

For additions (green text): [ADD]text here[/ADD]
For deletions (red text): [DEL]text here[/DEL]

Always close every marker you open, and never nest markers.
Do not use ANSI escape codes.""",
    "ansi": """\
IMPORTANT: For colored text, use the following ANSI escape codes with the full escape character prefix:

For additions (green text): \\033[32;1m text here \\033[0m
For deletions (red text): \\033[31;1m text here \\033[0m

Make sure to include the full '\\033' escape character prefix and always close with '\\033[0m' to reset the color.""",
}

# Output layout the model is asked to fill in.
OUTPUT_TEMPLATE = """\
--------------------------------------------------
SUMMARY:
  - Files modified: {files_modified}
  - One line summary of the changes
  - Insertions: {insertions}
  - Deletions: {deletions}

FILE CHANGES:
{file_changes}

DETAILS:
  file1:
    + {detailed_breakdown_additions}
    - {detailed_breakdown_deletions}
  ...
--------------------------------------------------"""
