"""
Built-in templates, one per positioning technology.

Each custom field is {"id", "name", "label", "type", "required"} plus an
optional "unit"; the stop editor renders one input per field and stores the
answers in Stop.customFieldValues under the field id.
"""

from typing import Any, Dict, List, Optional


def _field(field_id: str, label: str, field_type: str, required: bool, unit: Optional[str] = None) -> Dict[str, Any]:
    field: Dict[str, Any] = {
        "id": field_id,
        "name": field_id,
        "label": label,
        "type": field_type,
        "required": required,
    }
    if unit:
        field["unit"] = unit
    return field


BUILTIN_TEMPLATES: List[Dict[str, Any]] = [
    {
        "name": "QR Code",
        "description": "Zero hardware cost. Visitors scan codes with their camera. Perfect for getting started quickly.",
        "icon": "📱",
        "custom_fields": [
            _field("qrSize", "QR Code Size", "text", False),
            _field("placement", "Placement Notes", "textarea", False),
            _field("shortCode", "Short URL Code", "text", False),
        ],
    },
    {
        "name": "GPS / Lat-Long",
        "description": "For outdoor exhibits, sculpture gardens, and archaeological sites. Uses device GPS with geofencing.",
        "icon": "📍",
        "custom_fields": [
            _field("latitude", "Latitude", "number", True),
            _field("longitude", "Longitude", "number", True),
            _field("radius", "Trigger Radius (meters)", "number", True, unit="m"),
            _field("elevation", "Elevation", "number", False, unit="m"),
        ],
    },
    {
        "name": "BLE Beacon",
        "description": "Indoor positioning using Bluetooth Low Energy beacons. ±1.5-3 meter accuracy with triangulation.",
        "icon": "📶",
        "custom_fields": [
            _field("uuid", "Beacon UUID", "text", True),
            _field("major", "Major Value", "number", True),
            _field("minor", "Minor Value", "number", True),
            _field("txPower", "TX Power", "number", False),
            _field("triggerRadius", "Trigger Radius (m)", "number", False, unit="m"),
        ],
    },
    {
        "name": "NFC",
        "description": "Tap-to-trigger with Near Field Communication. Ultra-short range, no battery required, very cost-effective.",
        "icon": "📲",
        "custom_fields": [
            _field("tagId", "NFC Tag ID", "text", True),
            _field("tagType", "Tag Type", "text", False),
            _field("tapInstructions", "Tap Instructions", "textarea", False),
        ],
    },
    {
        "name": "RFID",
        "description": "Radio Frequency Identification for medium-range tracking. Great for artifact tracking + visitor triggers.",
        "icon": "🔖",
        "custom_fields": [
            _field("tagId", "RFID Tag ID", "text", True),
            _field("frequency", "Frequency (LF/HF/UHF)", "text", False),
            _field("isActive", "Active Tag?", "text", False),
        ],
    },
    {
        "name": "WiFi Positioning",
        "description": "Uses existing WiFi infrastructure for triangulation. 5-15 meter accuracy, lower cost if WiFi installed.",
        "icon": "📡",
        "custom_fields": [
            _field("accessPoints", "Access Point BSSIDs", "textarea", True),
            _field("signalThreshold", "Signal Threshold (dBm)", "number", False),
        ],
    },
    {
        "name": "Ultra-Wideband (UWB)",
        "description": "Highest accuracy at ±10-50cm. Real-time positioning for premium installations.",
        "icon": "🎯",
        "custom_fields": [
            _field("anchorId", "UWB Anchor ID", "text", True),
            _field("xCoord", "X Coordinate", "number", True),
            _field("yCoord", "Y Coordinate", "number", True),
            _field("zCoord", "Z Coordinate", "number", False),
            _field("radius", "Trigger Radius (cm)", "number", False, unit="cm"),
        ],
    },
]
