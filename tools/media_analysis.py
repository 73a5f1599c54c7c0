"""Audio and video steps."""
from core.models import Step, ContentCategory

AUDIO_DIR = "Audio Analysis"
VIDEO_DIR = "Video Analysis"

AUDIO = (ContentCategory.AUDIO,)
VIDEO = (ContentCategory.VIDEO,)

CONTAINER_STEPS = (
    Step("ffmpeg", "ffmpeg -i {file} -f null - 2>&1 | head -50", AUDIO_DIR),
    Step("mediainfo", "mediainfo --Full {file}", AUDIO_DIR, requires=("mediainfo",)),
    Step("hachoir", "hachoir-metadata {file}", "Metadata",
         probe="hachoir-metadata", requires=("hachoir-metadata",)),
)

AUDIO_STEPS = (
    Step("spectrogram", "sox {file} -n spectrogram -o spectrogram.png 2>/dev/null "
                        "|| echo 'Spectrogram generation failed'",
         AUDIO_DIR, probe="sox", requires=("sox",), categories=AUDIO),
    Step("wavsteg", "wavsteg -r -s {file} -o wavsteg_extracted.txt 2>/dev/null "
                    "|| echo 'No steganography found'",
         "Steganography", requires=("wavsteg",), categories=AUDIO),
    Step("audio_steghide", "steghide extract -sf {file} -p '' -xf steghide_extracted.txt 2>/dev/null "
                           "|| echo 'No steganography found or wrong passphrase'",
         "Steganography", probe="steghide", categories=AUDIO),
    Step("waveform", "ffmpeg -i {file} -filter_complex 'showwavespic=s=1000x200' -frames:v 1 "
                     "waveform.png -y 2>/dev/null || echo 'Waveform generation failed'",
         AUDIO_DIR, probe="ffmpeg", categories=AUDIO),
)

VIDEO_STEPS = (
    Step("extract_frames", r"ffmpeg -i {file} -vf 'select=lt(n\,10)' -vsync vfr -frames:v 10 "
                           "frames/frame_%04d.png -y 2>/dev/null || echo 'Frame extraction failed'",
         VIDEO_DIR, probe="ffmpeg", categories=VIDEO, workdirs=("frames",)),
    Step("extract_audio", "ffmpeg -i {file} -vn -acodec pcm_s16le audio.wav -y 2>/dev/null "
                          "|| echo 'Audio extraction failed'",
         VIDEO_DIR, probe="ffmpeg", categories=VIDEO),
    Step("video_meta", "ffprobe -v quiet -print_format json -show_format -show_streams {file}",
         VIDEO_DIR, probe="ffprobe", categories=VIDEO),
    Step("subtitles", "ffmpeg -i {file} -map 0:s:0 subtitles.srt -y 2>/dev/null "
                      "|| echo 'No subtitles found'",
         VIDEO_DIR, probe="ffmpeg", categories=VIDEO),
)

MEDIA_STEPS = CONTAINER_STEPS + AUDIO_STEPS + VIDEO_STEPS
