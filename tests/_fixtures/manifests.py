"""Sample Package.swift sources shared across tests."""

APP_MANIFEST = """\
// swift-tools-version:5.9
import PackageDescription

let package = Package(
    name: "App",
    platforms: [
        .macOS(.v10_15),
        .iOS(.v13)
    ],
    products: [
        .executable(name: "App", targets: ["App"]),
        .library(name: "AppCore", targets: ["Core"])
    ],
    dependencies: [
        .package(url: "https://github.com/apple/swift-argument-parser.git", from: "1.2.0"),
        .package(path: "../utils")
    ],
    targets: [
        .executableTarget(
            name: "App",
            dependencies: ["Core", "swift-argument-parser"]
        ),
        .target(
            name: "Core",
            dependencies: ["utils"]
        ),
        .testTarget(
            name: "AppTests",
            dependencies: ["App"]
        )
    ]
)
"""

EMPTY_DEPENDENCIES_MANIFEST = """\
// swift-tools-version:5.9
import PackageDescription

let package = Package(
    name: "Lib",
    dependencies: [],
    targets: [
        .target(name: "Lib"),
        .testTarget(name: "LibTests", dependencies: ["Lib"])
    ]
)
"""

TWO_TARGET_MANIFEST = """\
// swift-tools-version:5.9
import PackageDescription

let package = Package(
    name: "Pair",
    dependencies: [
        .package(url: "https://github.com/apple/swift-collections.git", from: "1.0.0")
    ],
    targets: [
        .target(name: "T1", dependencies: ["Collections"]),
        .target(name: "T2", dependencies: []),
        .testTarget(name: "PairTests", dependencies: ["T1"])
    ]
)
"""


def library_manifest(name: str, dependencies: str = "") -> str:
    """Return a minimal library manifest with optional dependency declarations."""
    return f"""\
// swift-tools-version:5.9
import PackageDescription

let package = Package(
    name: "{name}",
    dependencies: [{dependencies}],
    targets: [
        .target(name: "{name}")
    ]
)
"""


__all__ = [
    "APP_MANIFEST",
    "EMPTY_DEPENDENCIES_MANIFEST",
    "TWO_TARGET_MANIFEST",
    "library_manifest",
]
