from cardwar.common.io_interface import ConsoleIOInterface, DummyIOInterface, TestIOInterface


def test_test_io_interface_collects_output():
    io = TestIOInterface()
    io.output("first")
    io.output("second")
    assert io.output_messages == ["first", "second"]


def test_dummy_io_interface_discards_output(capsys):
    DummyIOInterface().output("hidden")
    assert capsys.readouterr().out == ""


def test_console_io_interface_prints(capsys):
    ConsoleIOInterface().output("hello")
    assert capsys.readouterr().out == "hello\n"
