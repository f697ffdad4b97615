import re
from typing import Optional

# MIME type -> human readable name
FORMAT_DISPLAY_NAMES = {
    # ArcGIS formats
    "application/x-arcgis-online-service": "ArcGIS Online Service",
    "application/x-arcgis-map-service": "ArcGIS Map Service",
    "application/x-arcgis-feature-service": "ArcGIS Feature Service",
    "application/x-arcgis-image-service": "ArcGIS Image Service",
    "application/x-arcgis-layer-package": "ArcGIS Layer Package",
    "application/x-arcgis-map-package": "ArcGIS Map Package",
    "application/x-esri-shapefile": "Shapefile",
    "application/x-esri-gdb": "File Geodatabase",

    # Common GIS formats
    "application/vnd.google-earth.kml+xml": "KML",
    "application/vnd.google-earth.kmz": "KMZ",
    "application/geo+json": "GeoJSON",
    "application/geopackage+sqlite3": "GeoPackage",
    "application/x-geotiff": "GeoTIFF",

    # Web services
    "application/vnd.ogc.wms_xml": "WMS Service",
    "application/vnd.ogc.wfs_xml": "WFS Service",
    "application/vnd.ogc.wcs_xml": "WCS Service",
    "application/vnd.ogc.wmts_xml": "WMTS Service",

    # Documents
    "application/pdf": "PDF Document",
    "application/msword": "Word Document",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "Word Document",
    "application/vnd.ms-excel": "Excel Spreadsheet",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "Excel Spreadsheet",

    # Images
    "image/jpeg": "JPEG Image",
    "image/png": "PNG Image",
    "image/tiff": "TIFF Image",
    "image/gif": "GIF Image",

    # Data
    "text/csv": "CSV File",
    "application/json": "JSON",
    "application/xml": "XML",
    "text/xml": "XML",

    # Archives
    "application/zip": "ZIP Archive",
    "application/x-tar": "TAR Archive",
    "application/gzip": "GZIP Archive",
}

_PREFIXES = re.compile(r"^(application|image|text)/")


def get_format_display_name(fmt: Optional[str]) -> str:
    """
    Display name for a MIME format. Unknown formats are cleaned up
    ("application/x-foo-bar" -> "Foo Bar").
    """
    if not fmt:
        return "Unknown"

    known = FORMAT_DISPLAY_NAMES.get(fmt.lower())
    if known:
        return known

    cleaned = _PREFIXES.sub("", fmt)
    cleaned = re.sub(r"^x-", "", cleaned)
    cleaned = re.sub(r"\+(xml|json)$", "", cleaned)
    cleaned = cleaned.replace("-", " ").replace("_", " ")
    cleaned = " ".join(w[:1].upper() + w[1:] for w in cleaned.split(" "))
    return cleaned.strip() or "Unknown"


def get_format_category(fmt: Optional[str]) -> str:
    """Coarse grouping used for the format filter."""
    if not fmt:
        return "Other"

    f = fmt.lower()
    if "arcgis" in f or "esri" in f:
        return "ArcGIS"
    if "ogc" in f or "wms" in f or "wfs" in f:
        return "OGC Services"
    if "geo" in f or "shapefile" in f or "kml" in f:
        return "GIS Data"
    if any(k in f for k in ("image", "tiff", "jpeg", "png")):
        return "Images"
    if any(k in f for k in ("pdf", "word", "document")):
        return "Documents"
    if any(k in f for k in ("csv", "excel", "spreadsheet")):
        return "Tabular Data"
    return "Other"
