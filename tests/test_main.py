import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import json

from main import ApplicationManager, parse_arguments


def test_parse_generate_arguments():
    args = parse_arguments(["--log-level", "DEBUG", "generate", "req.json", "-o", "pdfs"])
    assert args.command == "generate"
    assert args.request_file == "req.json"
    assert args.output == "pdfs"
    assert args.log_level == "DEBUG"


def test_serve_is_default_command():
    args = parse_arguments([])
    assert args.command == "serve"
    assert args.port is None


def test_default_configuration_written(tmp_path, monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    manager = ApplicationManager(config_dir=tmp_path)
    manager._load_configuration()
    assert (tmp_path / "config.ini").exists()
    assert manager.server_address() == ("0.0.0.0", 3000)
    assert manager.flask_config()["EMOJI_FONT_PATHS"] is None


def test_port_environment_override(tmp_path, monkeypatch):
    monkeypatch.setenv("PORT", "8081")
    manager = ApplicationManager(config_dir=tmp_path)
    manager._load_configuration()
    assert manager.server_address()[1] == 8081


def test_font_paths_from_config(tmp_path):
    manager = ApplicationManager(config_dir=tmp_path)
    manager._load_configuration()
    manager.config['Fonts']['emoji_font_paths'] = os.pathsep.join(["/a.ttf", "/b.ttf"])
    assert manager.flask_config()["EMOJI_FONT_PATHS"] == ["/a.ttf", "/b.ttf"]


def test_generate_from_request_file(tmp_path):
    request_file = tmp_path / "request.json"
    request_file.write_text(json.dumps({
        "problemTitle": "Two Sum",
        "analysis": "# Intro\nSolve it.",
        "date": "2024-01-05",
    }), encoding="utf-8")

    manager = ApplicationManager(config_dir=tmp_path / "config")
    manager._create_config_directory()
    manager._load_configuration()
    manager.config['Fonts']['emoji_font_paths'] = os.pathsep.join([str(tmp_path / "none.ttf")])
    manager._initialize_components()
    manager.is_running = True

    pdf_path = manager.generate(str(request_file), output_dir=str(tmp_path / "out"))
    assert os.path.basename(pdf_path) == "LeetCode_2024_01_05.pdf"
    with open(pdf_path, 'rb') as f:
        assert f.read(4) == b'%PDF'


def test_shutdown_saves_settings(tmp_path):
    manager = ApplicationManager(config_dir=tmp_path)
    manager.settings["port"] = 4000
    manager.is_running = True
    manager.shutdown()
    assert manager.is_running is False
    assert json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))["port"] == 4000
    # a second call is a no-op
    manager.shutdown()
