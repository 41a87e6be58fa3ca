import logging

import pytest

from main import main


def test_missing_argument_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code != 0
    assert "usage" in capsys.readouterr().err


def test_success_exits_zero(bmp_file, sample_2x2, caplog):
    path = bmp_file(**sample_2x2)
    with caplog.at_level(logging.INFO, logger='bmpconv'):
        assert main([str(path)]) == 0
    assert "Decoded" in caplog.text
    assert "2x2" in caplog.text


def test_verbose_dumps_header(bmp_file, caplog):
    path = bmp_file(width=1, height=1, bit_depth=8, rows=[b'\x01'],
                    palette=[(0, 0, 0), (9, 8, 7)], colors_used=2)
    with caplog.at_level(logging.DEBUG, logger='bmpconv'):
        assert main([str(path), '--verbose']) == 0
    assert "row stride" in caplog.text
    assert "R:[9], G:[8], B:[7]" in caplog.text


def test_decode_failure_exits_nonzero(bmp_file, sample_2x2, caplog):
    path = bmp_file(compression=1, **sample_2x2)
    with caplog.at_level(logging.ERROR, logger='bmpconv'):
        assert main([str(path)]) == 1
    assert "UnsupportedFormat" in caplog.text


def test_missing_file_exits_nonzero(tmp_path, caplog):
    with caplog.at_level(logging.ERROR, logger='bmpconv'):
        assert main([str(tmp_path / 'nope.bmp')]) == 1
    assert "BMPIOError" in caplog.text


def test_export(bmp_file, sample_2x2, tmp_path):
    path = bmp_file(**sample_2x2)
    out = tmp_path / 'icon.h'
    assert main([str(path), '--export', str(out), '--format', 'rgb565',
                 '--name', 'icon_px']) == 0
    text = out.read_text(encoding='utf-8')
    assert "static const uint16_t icon_px[4]" in text
    # top row first: blue, white, then red, green
    assert "0x001F, 0xFFFF, 0xF800, 0x07E0," in text


def test_no_export_on_failure(bmp_file, sample_2x2, tmp_path):
    path = bmp_file(truncate=3, **sample_2x2)
    out = tmp_path / 'icon.h'
    assert main([str(path), '--export', str(out)]) == 1
    assert not out.exists()


def test_oversized_dimensions_exit_nonzero(bmp_file, caplog):
    path = bmp_file(width=1, height=1, bit_depth=24, rows=[b'\x00\x00\x00'])
    data = bytearray(path.read_bytes())
    data[18:26] = (0x7FFFFFFF).to_bytes(4, 'little') * 2
    path.write_bytes(bytes(data))
    with caplog.at_level(logging.ERROR, logger='bmpconv'):
        assert main([str(path)]) == 1
    assert "UnsupportedFormat" in caplog.text


@pytest.fixture
def fresh_logger():
    log = logging.getLogger('bmpconv')
    saved = log.handlers[:]
    log.handlers.clear()
    yield log
    log.handlers[:] = saved


def test_unwritable_log_file_is_usage_error(bmp_file, sample_2x2, tmp_path, fresh_logger, capsys):
    path = bmp_file(**sample_2x2)
    blocker = tmp_path / 'not_a_dir'
    blocker.write_text('')
    with pytest.raises(SystemExit) as exc:
        main([str(path), '--log-file', str(blocker / 'run.log')])
    assert exc.value.code == 2
    assert "cannot open log file" in capsys.readouterr().err
    assert fresh_logger.handlers == []
