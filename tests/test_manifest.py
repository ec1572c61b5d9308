import json
import tempfile
import unittest
from pathlib import Path

from vibeos.loader import load_manifest
from vibeos.manifest import Manifest, ManifestError, Phase

DOCUMENT = """
metadata:
  name: counter-button
  version: 1.0
spec:
  intent: Count clicks
  constraints:
    framework: React
    language: TypeScript
    testing: [Jest]
  functionalSpec:
    states: [idle, counting]
    behaviors: [increments on click]
"""


class ManifestTests(unittest.TestCase):
    def _write(self, name: str, text: str) -> Path:
        tmpdir = Path(tempfile.mkdtemp(prefix="vibeos-test-"))
        path = tmpdir / name
        path.write_text(text)
        return path

    def test_load_yaml(self):
        manifest = load_manifest(self._write("counter.yaml", DOCUMENT))
        self.assertEqual(manifest.name, "counter-button")
        self.assertEqual(manifest.metadata.version, "1.0")
        self.assertEqual(manifest.spec.constraints.testing, ["Jest"])
        self.assertIsNone(manifest.spec.visual_spec)
        self.assertIsNone(manifest.spec.functional_spec.inputs)
        self.assertEqual(manifest.status.phase, Phase.PENDING)
        self.assertEqual(manifest.status.current_loop, 0)

    def test_load_json_round_trips_to_camel_case(self):
        doc = Manifest.from_dict({
            "metadata": {"name": "n", "version": "1"},
            "spec": {
                "intent": "i",
                "constraints": {"framework": "f", "language": "l", "testing": []},
                "functional_spec": {"states": ["a"], "behaviors": ["b"], "inputs": ["x"]},
                "visual_spec": {"elements": ["e"]},
            },
            "status": {"phase": "Failed", "current_loop": 3, "last_error": "boom", "diff": 4},
        }).to_dict()
        manifest = load_manifest(self._write("m.json", json.dumps(doc)))
        self.assertEqual(manifest.to_dict(), doc)
        self.assertIn("functionalSpec", doc["spec"])
        self.assertEqual(doc["status"], {"phase": "Failed", "currentLoop": 3, "lastError": "boom", "diff": 4})

    def test_missing_fields(self):
        with self.assertRaises(ManifestError) as ctx:
            Manifest.from_dict({"metadata": {"name": "x", "version": "1"}})
        self.assertIn("spec", str(ctx.exception))
        with self.assertRaises(ManifestError) as ctx:
            load_manifest(self._write("bad.yaml", DOCUMENT.replace("  intent: Count clicks\n", "")))
        self.assertIn("spec.intent", str(ctx.exception))

    def test_wrong_types(self):
        with self.assertRaises(ManifestError):
            load_manifest(self._write("bad.yaml", DOCUMENT.replace("testing: [Jest]", "testing: Jest")))
        with self.assertRaises(ManifestError):
            Manifest.from_dict(["not", "a", "mapping"])

    def test_bad_status_phase(self):
        raw = load_manifest(self._write("ok.yaml", DOCUMENT)).to_dict()
        raw["status"]["phase"] = "Sleeping"
        with self.assertRaises(ManifestError):
            Manifest.from_dict(raw)

    def test_loader_errors(self):
        with self.assertRaises(ManifestError):
            load_manifest(Path("/nonexistent/manifest.yaml"))
        with self.assertRaises(ManifestError):
            load_manifest(self._write("manifest.toml", "x = 1"))
        with self.assertRaises(ManifestError):
            load_manifest(self._write("broken.json", "{not json"))
        with self.assertRaises(ManifestError):
            load_manifest(self._write("list.yaml", "- a\n- b\n"))


if __name__ == "__main__":
    unittest.main()
