"""Image-specific steps: stego probes, channel/bit-plane renders, format branches."""
from core.models import Step, MediaFormat

IMAGE = "Image Analysis"
STEGO = "Steganography"
META = "Metadata"

PNG = (MediaFormat.PNG,)
JPEG = (MediaFormat.JPEG,)
GIF = (MediaFormat.GIF,)
BMP = (MediaFormat.BMP,)

CONVERT = ("convert",)

PROBE_STEPS = (
    Step("identify", "identify -verbose {file}", IMAGE),
    Step("steghide",
         "timeout 30 steghide info {file} <<< '' 2>/dev/null "
         "|| echo 'No steganography detected or requires passphrase'",
         STEGO),
    Step("exiv2", "exiv2 -pa {file}", META, requires=("exiv2",)),
    Step("mat2", "mat2 --show {file}", META, requires=("mat2",)),
    Step("stegoveritas", "stegoveritas -out stegoveritas {file}", STEGO,
         requires=("stegoveritas",), workdirs=("stegoveritas",)),
    Step("stegdetect", "stegdetect -t all {file}", STEGO, requires=("stegdetect",)),
)

PROCESSING_STEPS = (
    Step("channels", "convert {file} -separate channels/channel_%d.png", IMAGE,
         probe="convert", requires=CONVERT, workdirs=("channels",)),
    Step("alpha", "convert {file} -alpha extract alpha_channel.png 2>/dev/null "
                  "|| echo 'No alpha channel found'",
         IMAGE, probe="convert", requires=CONVERT),
    Step("invert", "convert {file} -negate inverted.png", IMAGE,
         probe="convert", requires=CONVERT),
) + tuple(
    Step(f"bitplane_{i}",
         f"convert {{file}} -depth 8 -channel R -threshold {i * 12}% bitplane_{i}.png 2>/dev/null "
         f"|| echo 'Bitplane extraction failed for level {i}'",
         IMAGE, probe="convert", requires=CONVERT)
    for i in range(8)
)

RECOVERY_STEPS = (
    Step("photorec", "photorec /d photorec/ /cmd {file} search", "Extracted",
         requires=("photorec",), workdirs=("photorec",)),
)

FORMAT_STEPS = (
    # PNG
    Step("pngcheck", "pngcheck -vtp7f {file}", IMAGE, formats=PNG),
    Step("zsteg", "zsteg -a {file}", STEGO, formats=PNG),
    Step("png_chunks", r"hexdump -C {file} | grep -A 2 'IDAT\|IEND\|PLTE' | head -20", IMAGE,
         probe="hexdump", formats=PNG),
    # JPEG
    Step("jpeginfo", "jpeginfo -c {file}", IMAGE, formats=JPEG),
    Step("outguess", "outguess -r {file} outguess_extracted.txt 2>/dev/null "
                     "|| echo 'No hidden data found with outguess'",
         STEGO, formats=JPEG),
    Step("exiftool_thumb", "exiftool -b -ThumbnailImage {file} > thumbnail.jpg 2>/dev/null "
                           "|| echo 'No thumbnail found'",
         IMAGE, probe="exiftool", formats=JPEG),
    # GIF
    Step("gif_frames", "convert {file} frames/frame_%03d.png", IMAGE,
         probe="convert", requires=CONVERT, formats=GIF, workdirs=("frames",)),
    Step("gif_info", r"identify -format '%f[%s] Canvas=%Wx%H Offset=%X%Y Disposal=%d Delay=%T\n' {file}",
         IMAGE, probe="identify", requires=CONVERT, formats=GIF),
    # BMP
    Step("stegseek", "stegseek --crack {file} {wordlist} -f stegseek_extracted.txt 2>/dev/null "
                     "|| echo 'No steganography found with stegseek'",
         STEGO, requires=("stegseek",), formats=BMP),
)

OCR_STEPS = (
    Step("tesseract", "tesseract {file} ocr_output -l eng 2>/dev/null || echo 'OCR analysis failed'", IMAGE),
)

IMAGE_STEPS = PROBE_STEPS + PROCESSING_STEPS + RECOVERY_STEPS + FORMAT_STEPS + OCR_STEPS
