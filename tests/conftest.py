from __future__ import annotations

import pytest

from zernike_atlas.config import AtlasConfig, build_config


@pytest.fixture()
def small_config() -> AtlasConfig:
    return build_config(
        {
            "raster": {
                "preview_3d": {"resolution": 60},
                "preview_2d": {"resolution": 60},
                "detail": {"width": 120, "height": 120, "radius": 48, "resolution": 80},
            },
            "contour": {"samples": 48},
            "mesh": {"resolution": 24},
            "output": {"dpi": 40},
        }
    )
