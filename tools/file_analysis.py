"""Steps that apply to every input: identification, metadata, carving."""
from core.models import Step

BASIC = "Basic Analysis"

BASIC_STEPS = (
    Step("file", "file -b {file}", BASIC),
    Step("strings", "strings -n 8 -t x {file}", BASIC),
    Step("strings-utf", "strings -n 8 -t x -el {file}", BASIC, probe="strings"),
    Step("xxd", "xxd -g 1 {file} | head -n 100", BASIC),
    Step("ent", "ent -t {file}", BASIC),
)

METADATA_STEPS = (
    Step("exiftool", "exiftool -a -u -g1 {file}", "Metadata"),
)

# binwalk extracts into its working directory, which is Extracted/
CARVING_STEPS = (
    Step("binwalk", "binwalk -B -e {file}", "Extracted"),
)
