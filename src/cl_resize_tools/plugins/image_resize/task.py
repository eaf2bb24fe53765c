"""Image resize task implementation."""

import asyncio
from pathlib import Path
from typing import Callable, override

from loguru import logger

from ...common.compute_module import ComputeModule
from .algo.pipeline import ResizePipeline
from .schema import ImageResizeOutput, ImageResizeParams


class ImageResizeTask(ComputeModule[ImageResizeParams, ImageResizeOutput]):
    """Compute module resizing one image file into a JPEG file."""

    schema: type[ImageResizeParams] = ImageResizeParams

    @property
    @override
    def task_type(self) -> str:
        return "image_resize"

    @override
    async def run(
        self,
        params: ImageResizeParams,
        progress_callback: Callable[[int], None] | None = None,
    ) -> ImageResizeOutput:
        input_path = Path(params.input_path)
        output_path = Path(params.output_path)

        if not input_path.exists():
            raise FileNotFoundError(f"Input file not found: {input_path}")
        if not output_path.parent.exists():
            raise FileNotFoundError(f"Output directory does not exist: {output_path.parent}")

        data = input_path.read_bytes()
        pipeline = ResizePipeline(params.to_options(), legacy=params.legacy_decoder)

        # libvips primitives cannot be interrupted; on timeout the worker
        # thread runs to completion and its result is dropped.
        try:
            encoded = await asyncio.wait_for(
                asyncio.to_thread(pipeline.run, data),
                timeout=params.timeout_seconds,
            )
        except TimeoutError as exc:
            raise TimeoutError(
                f"Resize of {input_path.name} timed out after {params.timeout_seconds}s"
            ) from exc

        _ = output_path.write_bytes(encoded)

        final = pipeline.trace[-1]
        logger.debug(f"Wrote {output_path} ({final.width}x{final.height}, {len(encoded)} bytes)")

        if progress_callback:
            progress_callback(100)

        return ImageResizeOutput(
            width=final.width,
            height=final.height,
            size_bytes=len(encoded),
            decode_shrink=pipeline.plan.decode_shrink if pipeline.plan else 1,
            stages=pipeline.stage_names,
        )
