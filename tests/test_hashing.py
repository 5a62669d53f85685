import string

from fooddlv.hashing import Md5Hash


def test_rfc1321_vectors():
    assert Md5Hash("", "").hash() == "d41d8cd98f00b204e9800998ecf8427e"
    assert Md5Hash("a", "bc").hash() == "900150983cd24fb0d6963f7d28e17f72"
    assert Md5Hash("message ", "digest").hash() == "f96b697d7cb7938d525a2f31aaf161d0"


def test_hash_depends_only_on_concatenation():
    assert Md5Hash("ab", "c").hash() == Md5Hash("a", "bc").hash()


def test_hash_is_hex_of_fixed_length():
    digest = Md5Hash("password", "salt").hash()
    assert len(digest) == 32
    assert set(digest) <= set(string.hexdigits.lower())


def test_salt_changes_hash():
    assert Md5Hash("password", "one").hash() != Md5Hash("password", "two").hash()
    assert Md5Hash("password", "one").salt == "one"