"""Browser-side scripts used by the screenshot pipeline.

Every script is a function body that reads its parameters from
``arguments[i]``, which is what WebDriver's execute endpoint expects. Scripts
that return data return a JSON string so that all gateways hand back the
same shape.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BrowserScript:
    name: str
    version: int
    source: str

    def __str__(self) -> str:
        return f"{self.name}@v{self.version}"


# Measures the viewport with a fixed-position probe; shared by several scripts
_MEASURE_VIEWPORT = """
    var probe = document.createElement('div');
    probe.style.position = 'fixed';
    probe.style.top = 0;
    probe.style.left = 0;
    probe.style.bottom = 0;
    probe.style.right = 0;
    document.documentElement.insertBefore(probe, document.documentElement.firstChild);
    var viewportWidth = probe.offsetWidth, viewportHeight = probe.offsetHeight;
    document.documentElement.removeChild(probe);
"""

_MEASURE_DOCUMENT = """
    var de = document.documentElement, body = document.body;
    var documentWidth = Math.max(body.scrollWidth, body.offsetWidth, de.clientWidth, de.scrollWidth, de.offsetWidth);
    var documentHeight = Math.max(body.scrollHeight, body.offsetHeight, de.clientHeight, de.scrollHeight, de.offsetHeight);
"""


# in: -
# out: JSON {viewport: {x, y, width, height},
#            document: {width, height, css_height, overflow},
#            body_transform: {property, value}}
SCREENSHOT_INIT = BrowserScript(
    name="screenshot.init",
    version=1,
    source=_MEASURE_VIEWPORT + _MEASURE_DOCUMENT + """
    var initData = {
        viewport: {
            x: window.pageXOffset || body.scrollLeft || de.scrollLeft || 0,
            y: window.pageYOffset || body.scrollTop || de.scrollTop || 0,
            width: viewportWidth,
            height: viewportHeight
        },
        document: {
            width: documentWidth,
            height: documentHeight,
            css_height: body.style.height,
            overflow: body.style.overflow
        },
        body_transform: {}
    };

    var property = 'transform';
    if (body.style.webkitTransform !== undefined) {
        property = 'webkitTransform';
    } else if (body.style.mozTransform !== undefined) {
        property = 'mozTransform';
    } else if (body.style.msTransform !== undefined) {
        property = 'msTransform';
    } else if (body.style.oTransform !== undefined) {
        property = 'oTransform';
    }
    initData.body_transform.property = property;
    initData.body_transform.value = body.style[property];

    // Cancel the current scroll position through a translation
    body.style[property] = 'translate(' + initData.viewport.x + 'px, ' + initData.viewport.y + 'px)';

    return JSON.stringify(initData);
""",
)

# in: InitData
SCREENSHOT_REVERT = BrowserScript(
    name="screenshot.revert",
    version=1,
    source="""
    var initData = arguments[0], body = document.body;
    body.style.height = initData.document.css_height;
    body.style.overflow = initData.document.overflow;
    body.style[initData.body_transform.property] = initData.body_transform.value;
""",
)

# in: x, y, height (px or null), InitData
# Moves the document instead of scrolling so fixed elements stay in place.
DOCUMENT_OFFSET = BrowserScript(
    name="screenshot.document_offset",
    version=1,
    source="""
    var x = arguments[0], y = arguments[1], height = arguments[2], initData = arguments[3],
        body = document.body;
    body.style[initData.body_transform.property] =
        'translate(' + (-x + initData.viewport.x) + 'px, ' + (-y + initData.viewport.y) + 'px)';
    if (height) {
        body.style.height = height + 'px';
    }
""",
)

# in: -
# out: JSON {body: {...}, root: {...}, document_width, device_pixel_ratio, viewport_width}
# Shrinks the document to a single row as wide as the viewport.
DEVICE_PIXEL_RATIO_INIT = BrowserScript(
    name="devicePixelRatio.init",
    version=1,
    source=_MEASURE_VIEWPORT + """
    var de = document.documentElement, body = document.body;
    var initData = {
        body: {
            overflow: body.style.overflow, width: body.style.width, height: body.style.height,
            min_width: body.style.minWidth, min_height: body.style.minHeight
        },
        root: {
            overflow: de.style.overflow, width: de.style.width, height: de.style.height,
            min_width: de.style.minWidth, min_height: de.style.minHeight
        },
        device_pixel_ratio: window.devicePixelRatio || 1,
        viewport_width: viewportWidth,
        document_width: viewportWidth
    };

    [body, de].forEach(function (el) {
        el.style.overflow = 'hidden';
        el.style.width = viewportWidth + 'px';
        el.style.height = '1px';
        el.style.minWidth = '0';
        el.style.minHeight = '0';
    });

    return JSON.stringify(initData);
""",
)

_RESTORE_STYLES = """
    var initData = arguments[0], pairs = [[document.body, initData.body], [document.documentElement, initData.root]];
    pairs.forEach(function (pair) {
        var el = pair[0], styles = pair[1];
        if (!styles) {
            return;
        }
        el.style.overflow = styles.overflow;
        el.style.width = styles.width;
        el.style.height = styles.height;
        el.style.minWidth = styles.min_width || '';
        el.style.minHeight = styles.min_height || '';
    });
"""

# in: init data of devicePixelRatio.init
DEVICE_PIXEL_RATIO_REVERT = BrowserScript(
    name="devicePixelRatio.revert",
    version=1,
    source=_RESTORE_STYLES,
)

# in: horizontal padding (px)
# out: JSON {body: {...}, viewport_width}
# Resizes the document to twice the viewport width less the horizontal padding,
# and 1px height.
STITCHING_INIT = BrowserScript(
    name="stitching.init",
    version=1,
    source=_MEASURE_VIEWPORT + """
    var horizontalPadding = arguments[0] || 0, body = document.body;
    var initData = {
        body: {
            overflow: body.style.overflow, width: body.style.width, height: body.style.height,
            min_width: body.style.minWidth, min_height: body.style.minHeight
        },
        viewport_width: viewportWidth
    };

    body.style.overflow = 'hidden';
    body.style.width = ((viewportWidth * 2) - horizontalPadding) + 'px';
    body.style.height = '1px';

    return JSON.stringify(initData);
""",
)

# in: init data of stitching.init
STITCHING_REVERT = BrowserScript(
    name="stitching.revert",
    version=1,
    source=_RESTORE_STYLES,
)

# in: -
# out: JSON {document: {width, height}, viewport: {x, y, width, height}}
WINDOW_INFO = BrowserScript(
    name="window.info",
    version=1,
    source=_MEASURE_VIEWPORT + _MEASURE_DOCUMENT + """
    return JSON.stringify({
        document: {width: documentWidth, height: documentHeight},
        viewport: {
            x: window.pageXOffset || body.scrollLeft || de.scrollLeft || 0,
            y: window.pageYOffset || body.scrollTop || de.scrollTop || 0,
            width: viewportWidth,
            height: viewportHeight
        }
    });
""",
)

ALL_SCRIPTS = (
    SCREENSHOT_INIT,
    SCREENSHOT_REVERT,
    DOCUMENT_OFFSET,
    DEVICE_PIXEL_RATIO_INIT,
    DEVICE_PIXEL_RATIO_REVERT,
    STITCHING_INIT,
    STITCHING_REVERT,
    WINDOW_INFO,
)
