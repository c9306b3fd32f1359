import os
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf
import numpy as np

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

import PIL.Image
import imageio

from mandelframe import FrameConfig, FrameHost, MappingMode, ViewState
from mandelframe.view import SEAHORSE_VALLEY

from argparse import ArgumentParser

WINDOW_TITLE = "Mandelbrot"
_DEFAULTS = FrameConfig()


@dataclass
class OutputConfig:
    mode: str
    output_path: Path | None
    frame_dir: Path | None
    image_format: str
    frames: int


def build_parser():
    parser = ArgumentParser(description="Render the Mandelbrot set live in a window or to image files.")

    parser.add_argument('--width', type=int,
                        dest='width', help='initial width of the window (or exported frames) in pixels',
                        metavar='WIDTH', default=_DEFAULTS.width)

    parser.add_argument('--height', type=int,
                        dest='height', help='initial height of the window (or exported frames) in pixels',
                        metavar='HEIGHT', default=_DEFAULTS.height)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='escape-time iteration budget per pixel',
                        metavar='MAX_ITERATIONS', default=_DEFAULTS.max_iterations)

    parser.add_argument('--animate', action='store_true',
                        help='Zoom continuously toward --center-x/--center-y instead of showing the fixed window.')

    parser.add_argument('--zoom-speed', type=float,
                        dest='zoom_speed', help='zoom multiplier applied on every update tick when animating',
                        metavar='ZOOM_SPEED', default=_DEFAULTS.zoom_speed)

    parser.add_argument('--center-x', type=float,
                        dest='center_x', help='real coordinate the animated zoom is centered on',
                        metavar='CENTER_X', default=None)

    parser.add_argument('--center-y', type=float,
                        dest='center_y', help='imaginary coordinate the animated zoom is centered on',
                        metavar='CENTER_Y', default=None)

    parser.add_argument('--mode', dest='mode', choices=['window', 'image', 'gif', 'frames'], default='window',
                        help='Where frames go: a live window, the final frame as an image, a GIF, or numbered frames.')

    parser.add_argument('--frames', type=int,
                        dest='frames', help='number of frames to export; one update tick separates consecutive frames',
                        metavar='FRAMES', default=None)

    parser.add_argument('--interval', type=int,
                        dest='interval', help='milliseconds between update ticks in window mode',
                        metavar='INTERVAL', default=16)

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination file for the image and gif modes.')

    parser.add_argument('--frame-dir', dest='frame_dir', type=str,
                        help='Directory in which to store numbered frames (frames mode).')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image and frames modes. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow diagnostics.')

    return parser


def resolve_frame_config(opt, parser: ArgumentParser) -> tuple[FrameConfig, ViewState]:
    if not opt.animate and (opt.center_x is not None or opt.center_y is not None):
        parser.error("--center-x/--center-y only apply together with --animate.")

    try:
        config = FrameConfig(
            width=opt.width,
            height=opt.height,
            max_iterations=opt.max_iterations,
            zoom_speed=opt.zoom_speed,
            mapping=MappingMode.CENTERED_ZOOM if opt.animate else MappingMode.FIXED_WINDOW,
        )
    except ValueError as exc:
        parser.error(str(exc))

    view = ViewState(
        x_center=SEAHORSE_VALLEY[0] if opt.center_x is None else opt.center_x,
        y_center=SEAHORSE_VALLEY[1] if opt.center_y is None else opt.center_y,
    )
    return config, view


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    mode = opt.mode
    image_format = (getattr(opt, "format", "png") or "png").lower().lstrip(".")
    if not image_format:
        image_format = "png"

    frames = opt.frames
    if frames is None:
        frames = 100 if (mode in {"gif", "frames"} and opt.animate) else 1
    if mode != "window" and frames < 1:
        parser.error("--frames must be at least 1.")
    if mode == "window" and opt.frames is not None:
        parser.error("--frames is only valid with the image, gif or frames modes.")
    if opt.interval <= 0:
        parser.error("--interval must be positive.")

    output_arg = getattr(opt, "output", None)
    output_path: Path | None = None
    if mode in {"window", "frames"}:
        if output_arg:
            parser.error("--output is only valid with the image or gif modes.")
    else:
        if output_arg and str(output_arg).endswith(tuple(filter(None, {os.sep, os.altsep}))):
            parser.error("--output must be a file path.")
        if mode == "gif":
            output_path = Path(output_arg or "movie.gif").expanduser()
            if output_path.suffix:
                if output_path.suffix.lower() != ".gif":
                    parser.error("GIF outputs must end with .gif.")
            else:
                output_path = output_path.with_suffix(".gif")
        else:
            output_path = Path(output_arg or f"frame_final.{image_format}").expanduser()
            expected_suffix = f".{image_format}"
            if output_path.suffix:
                if output_path.suffix.lower() != expected_suffix.lower():
                    parser.error(f"--output extension {output_path.suffix} does not match --format {image_format}.")
            else:
                output_path = output_path.with_suffix(expected_suffix)
        if output_path.exists() and output_path.is_dir():
            parser.error("--output must point to a file, not a directory.")
        output_path = output_path.resolve()

    frame_dir: Path | None = None
    if mode == "frames":
        frame_dir = Path(getattr(opt, "frame_dir", None) or "./frames").expanduser().resolve()
    elif getattr(opt, "frame_dir", None) is not None:
        parser.error("--frame-dir is only valid with the frames mode.")

    return OutputConfig(
        mode=mode,
        output_path=output_path,
        frame_dir=frame_dir,
        image_format=image_format,
        frames=frames,
    )


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def _to_image(frame: np.ndarray, image_format: str) -> PIL.Image.Image:
    image = PIL.Image.fromarray(np.ascontiguousarray(frame))
    # JPEG and BMP have no alpha channel; every pixel is opaque anyway.
    if _pil_format_name(image_format) in {"JPEG", "BMP"}:
        image = image.convert("RGB")
    return image


def write_single_image(frame: np.ndarray, output_path: Path, image_format: str) -> None:
    """Write a single frame to ``output_path`` using the provided format."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    _to_image(frame, image_format).save(str(output_path), format=_pil_format_name(image_format))


def write_frame_sequence(
    frame: np.ndarray,
    frame_dir: Path,
    index: int,
    digits: int,
    image_format: str,
    prefix: str = "frame",
) -> Path:
    """Persist a frame in a numbered sequence inside ``frame_dir``."""

    frame_path = frame_dir / f"{prefix}{index:0{digits}d}.{image_format}"
    frame_dir.mkdir(parents=True, exist_ok=True)
    _to_image(frame, image_format).save(str(frame_path), format=_pil_format_name(image_format))
    return frame_path


def write_gif(writer: Any, frame: np.ndarray) -> None:
    """Append ``frame`` to an active GIF writer."""

    writer.append_data(np.ascontiguousarray(frame[..., :3]))


@dataclass
class OutputWriters:
    config: OutputConfig
    frame_digits: int

    def __post_init__(self) -> None:
        self._gif_writer = None
        if self.config.mode == "gif" and self.config.output_path is not None:
            self.config.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._gif_writer = imageio.get_writer(str(self.config.output_path), mode='I', duration=0.1, loop=0)
        if self.config.frame_dir is not None:
            self.config.frame_dir.mkdir(parents=True, exist_ok=True)

    def requires_frame(self, frame_index: int, total_frames: int) -> bool:
        if self.config.mode == "image":
            return frame_index == total_frames - 1
        return True

    def write(self, frame_index: int, frame: np.ndarray) -> None:
        if self._gif_writer is not None:
            write_gif(self._gif_writer, frame)
        elif self.config.mode == "frames" and self.config.frame_dir is not None:
            write_frame_sequence(frame, self.config.frame_dir, frame_index, self.frame_digits, self.config.image_format)
        elif self.config.mode == "image" and self.config.output_path is not None:
            write_single_image(frame, self.config.output_path, self.config.image_format)

    def close(self) -> None:
        if self._gif_writer is not None:
            self._gif_writer.close()
            self._gif_writer = None


def export(host: FrameHost, output_config: OutputConfig) -> None:
    """Render ``output_config.frames`` frames, one update tick apart, to disk."""

    total = output_config.frames
    writers = OutputWriters(output_config, frame_digits=max(3, len(str(max(total - 1, 0)))))
    try:
        for i in range(total):
            print("frame {0} out of {1}".format(i, total), end='\r')
            if writers.requires_frame(i, total):
                writers.write(i, host.redraw())
                log(f"frame {i}: zoom={host.view.zoom:.6g}")
            if i < total - 1:
                host.update()
    finally:
        writers.close()
    print()


class Window:
    """Live matplotlib window presenting the frames of a :class:`FrameHost`."""

    def __init__(self, host: FrameHost, interval: int = 16, title: str = WINDOW_TITLE):
        import matplotlib.pyplot as plt

        self.host = host
        self.closed = False
        self._plt = plt

        dpi = 100
        with plt.rc_context({"toolbar": "None"}):
            self.fig = plt.figure(figsize=(host.width / dpi, host.height / dpi), dpi=dpi, frameon=False)
        self.ax = self.fig.add_axes([0, 0, 1, 1])
        self.ax.axis("off")
        self.img = self.ax.imshow(host.redraw(), origin="upper", aspect="auto", interpolation="nearest")

        manager = self.fig.canvas.manager
        if manager is not None:
            manager.set_window_title(title)
            # matplotlib's shortcut keys (q, f, s, ...) must not act on the window
            handler_id = getattr(manager, "key_press_handler_id", None)
            if handler_id is not None:
                self.fig.canvas.mpl_disconnect(handler_id)
                manager.key_press_handler_id = None
            # Tk backends only
            window = getattr(manager, "window", None)
            minsize = getattr(window, "minsize", None)
            if minsize is not None:
                minsize(host.config.width, host.config.height)

        self.fig.canvas.mpl_connect("key_press_event", self.on_key)
        self.fig.canvas.mpl_connect("resize_event", self.on_resize)
        self.fig.canvas.mpl_connect("close_event", self.on_close)

        self.timer = self.fig.canvas.new_timer(interval=interval)
        self.timer.add_callback(self.tick)

    def tick(self) -> None:
        """One input/update tick; static views only redraw when something changed."""

        if self.closed:
            return
        self.host.update()
        if self.host.animated:
            self.present()

    def present(self) -> None:
        frame = self.host.redraw()
        self.img.set_data(frame)
        self.fig.canvas.draw_idle()
        log(f"redraw {self.host.frames}: {self.host.width}x{self.host.height} zoom={self.host.view.zoom:.6g}")

    def on_key(self, event) -> None:
        if event.key == "escape":
            self.close()
            return
        self.tick()

    def on_resize(self, event) -> None:
        if self.closed:
            return
        if self.host.resize(event.width, event.height):
            self.present()

    def on_close(self, event) -> None:
        self.closed = True
        self.timer.stop()

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.timer.stop()
            self._plt.close(self.fig)

    def show(self) -> None:
        self.timer.start()
        self._plt.show()


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    config, view = resolve_frame_config(opt, parser)
    output_config = resolve_output_config(opt, parser)
    host = FrameHost(config, view)

    log("TensorFlow version: %s" % tf.__version__)
    log(f"{config.width}x{config.height}, mapping={config.mapping.value}, max_iterations={config.max_iterations}")

    if output_config.mode == "window":
        Window(host, interval=opt.interval).show()
    else:
        export(host, output_config)
    return 0


if __name__ == '__main__':
    sys.exit(main())
