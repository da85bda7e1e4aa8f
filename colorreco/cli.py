"""Command-line interface for colour block recognition."""

import logging
import sys
from pathlib import Path

import click
import cv2
from dotenv import load_dotenv

from colorreco import __version__
from colorreco.errors import ColorRecoError
from colorreco.histogram.distribution import color_distribution_from_region
from colorreco.library.reference import add_sample
from colorreco.session import RecognitionSession, SessionConfig
from colorreco.utils.display import blend_with_frame, load_frame, save_debug_image

# Load environment variables from .env
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)

logger = logging.getLogger(__name__)

WINDOW_NAME = "input"
TRACKBAR_NAME = "threshold"
KEY_ESCAPE = 27


def _set_verbose(verbose: bool) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """colorreco - recognize taught colour regions block by block."""
    pass


@main.command()
@click.option('--camera', type=int, default=0, envvar='COLORRECO_CAMERA', show_default=True,
              help='Video capture device index')
@click.option('--block-size', type=click.IntRange(min=1), default=8,
              envvar='COLORRECO_BLOCK_SIZE', show_default=True, help='Block edge in pixels')
@click.option('--threshold', type=click.IntRange(0, 100), default=5,
              envvar='COLORRECO_THRESHOLD', show_default=True,
              help='Initial duplicate-sample threshold, in percent')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def live(camera: int, block_size: int, threshold: int, verbose: bool) -> None:
    """Teach and recognize colour classes from a live camera.

    Keys: c capture sample (left half), s close class, r toggle recognition,
    v compare left/right halves, f freeze, q or ESC quit.
    """
    _set_verbose(verbose)

    config = SessionConfig(camera_index=camera, block_size=block_size, threshold_percent=threshold)
    session = RecognitionSession(config)

    capture = cv2.VideoCapture(config.camera_index)
    if not capture.isOpened():
        logger.error(f"Couldn't open camera {config.camera_index}")
        sys.exit(1)

    capture.set(cv2.CAP_PROP_FRAME_WIDTH, config.frame_width)
    capture.set(cv2.CAP_PROP_FRAME_HEIGHT, config.frame_height)

    ok, frame = capture.read()
    if not ok or frame is None:
        logger.error("Camera returned no frame")
        capture.release()
        sys.exit(1)

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_AUTOSIZE)
    cv2.createTrackbar(TRACKBAR_NAME, WINDOW_NAME, config.threshold_percent, 100,
                       session.set_threshold_percent)
    logger.info(f"Camera {config.camera_index} open, {frame.shape[1]}x{frame.shape[0]}")

    try:
        while True:
            key = cv2.waitKey(config.frame_delay_ms) & 0xFF
            if not session.frozen:
                ok, new_frame = capture.read()
                if ok and new_frame is not None:
                    frame = new_frame

            if key in (KEY_ESCAPE, ord('q')):
                break
            if key == ord('f'):
                session.toggle_freeze()
            elif key == ord('v'):
                session.compare_regions(frame)
            elif key == ord('c'):
                session.capture_sample(frame)
            elif key == ord('r'):
                session.toggle_recognition()
            elif key == ord('s'):
                session.close_class()

            cv2.imshow(WINDOW_NAME, session.render(frame))
    finally:
        capture.release()
        cv2.destroyAllWindows()


@main.command()
@click.argument('image', type=click.Path(exists=True, dir_okay=False))
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def compare(image: str, verbose: bool) -> None:
    """Print the distance between the left and right halves of IMAGE."""
    _set_verbose(verbose)

    try:
        frame = load_frame(image)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    distance = RecognitionSession().compare_regions(frame)
    if distance is None:
        sys.exit(1)
    click.echo(f"{distance:.6f}")


@main.command()
@click.argument('image', type=click.Path(exists=True, dir_okay=False))
@click.option('--class', 'class_specs', multiple=True, required=True,
              help='Comma-separated reference images for one class (repeat per class)')
@click.option('--output', '-o', 'output_path', type=click.Path(dir_okay=False),
              default='./output/recognition.png', show_default=True,
              help='Where to write the recognition image')
@click.option('--block-size', type=click.IntRange(min=1), default=8,
              envvar='COLORRECO_BLOCK_SIZE', show_default=True, help='Block edge in pixels')
@click.option('--threshold', type=click.IntRange(0, 100), default=5,
              envvar='COLORRECO_THRESHOLD', show_default=True,
              help='Duplicate-sample threshold, in percent')
@click.option('--aggregate', type=click.Choice(['mean', 'min']), default='mean',
              show_default=True, help='How distances to a class\'s samples are combined')
@click.option('--no-smooth', is_flag=True, help='Skip the majority-vote pass')
@click.option('--blend', is_flag=True, help='Blend the result with the grey-scaled input')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def classify(
    image: str,
    class_specs: tuple,
    output_path: str,
    block_size: int,
    threshold: int,
    aggregate: str,
    no_smooth: bool,
    blend: bool,
    verbose: bool
) -> None:
    """Recognize IMAGE against classes taught from reference images.

    Each reference image is taken whole as one sample of its class.
    """
    _set_verbose(verbose)

    config = SessionConfig(
        block_size=block_size,
        threshold_percent=threshold,
        aggregate=aggregate,  # type: ignore[arg-type]
        smooth=not no_smooth,
    )
    session = RecognitionSession(config)

    try:
        frame = load_frame(image)
        for class_spec in class_specs:
            for ref_path in (p.strip() for p in class_spec.split(',') if p.strip()):
                ref = load_frame(ref_path)
                h, w = ref.shape[:2]
                cd = color_distribution_from_region(ref, (0, 0), (w, h))
                add_sample(cd, session.current_samples, config.threshold)
            session.close_class()

        raster = session.recognize(frame)
    except (ColorRecoError, FileNotFoundError, ValueError) as e:
        logger.error(f"Classification failed: {e}")
        sys.exit(1)

    if blend:
        raster = blend_with_frame(raster, frame, config.blend_alpha)

    save_debug_image(raster, Path(output_path), f"Recognition of {Path(image).name}")
    logger.info(f"Saved: {output_path} ({len(session.library)} classes, "
                f"{session.last_recognition_time:.3f}s)")


if __name__ == '__main__':
    main()
