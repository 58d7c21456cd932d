"""Downloadable sample files showing the accepted import formats."""
import json
from typing import Dict, Tuple

SAMPLE_JSON_TEMPLATE = {
    "title": "Customer Feedback Survey",
    "description": "Help us improve our services",
    "questions": [
        {
            "text": "How would you rate our service?",
            "type": "rating",
            "required": True,
            "minValue": 1,
            "maxValue": 5,
            "points": 10,
        },
        {
            "text": "Which features do you use most?",
            "type": "checkbox",
            "options": ["Speed", "Design", "Support"],
            "required": True,
            "points": 5,
        },
        {
            "text": "Any additional feedback?",
            "type": "paragraph",
            "required": False,
            "points": 0,
        },
    ],
}

SAMPLE_CSV_TEMPLATE = """text,type,options,required,minValue,maxValue,points
"How would you rate our service?",rating,,true,1,5,10
"Which features do you use most?",checkbox,"Speed|Design|Support",true,,,5
"How did you hear about us?",dropdown,"Social Media|Friend|Search Engine",false,,,5
"Any additional feedback?",paragraph,,false,,,0"""

SAMPLE_TSV_TEMPLATE = (
    "text\ttype\toptions\trequired\tminValue\tmaxValue\tpoints\n"
    '"How would you rate our service?"\trating\t\ttrue\t1\t5\t10\n'
    '"Which features do you use most?"\tcheckbox\tSpeed|Design|Support\ttrue\t\t\t5\n'
    '"How did you hear about us?"\tdropdown\tSocial Media|Friend|Search Engine\tfalse\t\t\t5\n'
    '"Any additional feedback?"\tparagraph\t\tfalse\t\t\t0'
)

# format -> (content type, attachment file name)
SAMPLE_FORMATS: Dict[str, Tuple[str, str]] = {
    "json": ("application/json", "survey_template.json"),
    "csv": ("text/csv", "survey_template.csv"),
    "tsv": ("text/tab-separated-values", "survey_template.tsv"),
}


def get_sample_template(sample_format: str) -> str:
    """
    Return the sample document for a format.

    Raises:
        KeyError: If the format is not one of SAMPLE_FORMATS
    """
    if sample_format == "json":
        return json.dumps(SAMPLE_JSON_TEMPLATE, indent=2)
    if sample_format == "csv":
        return SAMPLE_CSV_TEMPLATE
    if sample_format == "tsv":
        return SAMPLE_TSV_TEMPLATE
    raise KeyError(sample_format)
