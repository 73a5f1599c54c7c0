"""Alternate carving engines, each writing to its own subtree of Extracted/."""
from core.models import Step

CARVERS = ("foremost", "scalpel", "bulk_extractor")

ADVANCED_STEPS = (
    Step("foremost", "foremost -v -t all -i {file} -o foremost_output", "Extracted",
         requires=("foremost",)),
    Step("scalpel", "scalpel {file} -o scalpel_output", "Extracted", requires=("scalpel",)),
    Step("bulk_extractor", "bulk_extractor -o bulk_extractor_output {file}", "Extracted",
         requires=("bulk_extractor",)),
)
