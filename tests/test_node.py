from sshash.node import INVALID_UINT32, Node


def test_default_node_is_invalid():
    node = Node()
    assert node.id == INVALID_UINT32
    assert node.front == INVALID_UINT32
    assert node.back == INVALID_UINT32
    assert node.sign is True
    assert node.chain_id == INVALID_UINT32


def test_constructor_sets_fields():
    node = Node(3, 10, 20)
    assert (node.id, node.front, node.back, node.sign) == (3, 10, 20, True)
    assert node.left == INVALID_UINT32 and node.right == INVALID_UINT32


def test_change_orientation():
    node = Node(1, 4, 9)
    node.change_orientation()
    assert (node.front, node.back, node.sign) == (9, 4, False)


def test_change_orientation_twice_is_identity():
    node = Node(1, 4, 9, False)
    node.change_orientation()
    node.change_orientation()
    assert node == Node(1, 4, 9, False)


def test_is_leaf():
    assert Node(0, 1, 2).is_leaf()
    parent = Node(front=1, back=2, left=0, right=1)
    assert not parent.is_leaf()


def test_str():
    assert str(Node(12, 2, 7)) == "12:[2,7,+]"
    assert str(Node(12, 2, 7, False)) == "12:[2,7,-]"