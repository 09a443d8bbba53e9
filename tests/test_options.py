from brynet.options import ConnectionOption, ConnectOption


def test_connection_option_defaults():
    option = ConnectionOption()
    assert option.max_recv_buffer_size == 128
    assert option.use_ssl is False
    assert option.force_same_thread_loop is False
    assert option.enter_callbacks == []


def test_connection_option_lists_are_independent():
    first, second = ConnectionOption(), ConnectionOption()
    first.enter_callbacks.append(print)
    assert second.enter_callbacks == []


def test_connect_option_fields():
    option = ConnectOption(ip="127.0.0.1", port=8080)
    assert (option.ip, option.port) == ("127.0.0.1", 8080)
    assert option.completed_callback is None
    assert option.process_callbacks == []