class HuffmanError(Exception): # base class for every codec failure
    pass


class SymbolLookupError(HuffmanError, KeyError): # symbol missing from the code table while encoding
    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self):
        return f"no Huffman code for symbol {self.symbol!r}"


class TruncatedStreamError(HuffmanError, EOFError): # bitstream ended in the middle of a codeword or header
    pass


class CorruptStreamError(HuffmanError, ValueError): # bits lead somewhere the tree or format does not allow
    pass
